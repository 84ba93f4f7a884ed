from __future__ import annotations

from flask import Blueprint, Flask, jsonify

from ..common.web import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    bp = Blueprint("clients", __name__)
    guard = container.session_guard
    clients = container.client_service

    @bp.route("/agent/clients", methods=["GET"])
    @guard.login_required
    def list_clients():
        return jsonify([c.to_dict() for c in clients.list_clients(guard.current_user())])

    @bp.route("/agent/clients", methods=["POST"])
    @guard.login_required
    def create_client():
        return jsonify(clients.create_client(guard.current_user(), json_body()).to_dict()), 201

    @bp.route("/agent/clients/<int:client_id>", methods=["PATCH"])
    @guard.login_required
    def update_client(client_id: int):
        return jsonify(clients.update_client(guard.current_user(), client_id, json_body()).to_dict())

    @bp.route("/agent/clients/<int:client_id>", methods=["DELETE"])
    @guard.login_required
    def delete_client(client_id: int):
        clients.delete_client(guard.current_user(), client_id)
        return "", 204

    app.register_blueprint(bp, url_prefix=app.config["API_PREFIX"])
