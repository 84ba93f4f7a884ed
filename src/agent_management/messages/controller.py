from __future__ import annotations

from flask import Blueprint, Flask, jsonify

from ..common.web import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    bp = Blueprint("messages", __name__)
    guard = container.session_guard
    messages = container.message_service

    @bp.route("/messages", methods=["POST"])
    @guard.login_required
    def send_message():
        data = json_body()
        sent = messages.send(guard.current_user(), receiver_id=data.get("receiverId"), content=data.get("content"))
        return jsonify(sent.to_dict()), 201

    @bp.route("/messages", methods=["GET"])
    @guard.login_required
    def list_messages():
        return jsonify(messages.list_messages(guard.current_user()))

    @bp.route("/messages/conversations", methods=["GET"])
    @guard.login_required
    def conversations():
        return jsonify(messages.conversations(guard.current_user()))

    @bp.route("/messages/conversations/<int:user_id>", methods=["GET"])
    @guard.login_required
    def conversation(user_id: int):
        return jsonify(messages.thread(guard.current_user(), user_id))

    @bp.route("/messages/<int:message_id>/read", methods=["PATCH"])
    @guard.login_required
    def mark_read(message_id: int):
        return jsonify(messages.mark_read(guard.current_user(), message_id).to_dict())

    @bp.route("/users/available-receivers", methods=["GET"])
    @guard.login_required
    def available_receivers():
        return jsonify([u.to_contact() for u in messages.available_receivers(guard.current_user())])

    app.register_blueprint(bp, url_prefix=app.config["API_PREFIX"])
