from __future__ import annotations

from flask import Blueprint, Flask, jsonify, request

from ..common.web import json_body
from ..container import Container
from ..core.enums import Role
from .service import parse_resolved_filter


def register(app: Flask, container: Container) -> None:
    bp = Blueprint("help_requests", __name__)
    guard = container.session_guard
    help_requests = container.help_request_service

    @bp.route("/help-requests", methods=["POST"])
    def submit_help_request():
        data = json_body()
        created = help_requests.submit(name=data.get("name"), email=data.get("email"), message=data.get("message"))
        return jsonify(created.to_dict()), 201

    @bp.route("/admin/help-requests", methods=["GET"])
    @guard.roles_required(Role.ADMIN)
    def list_help_requests():
        resolved = parse_resolved_filter(request.args.get("resolved"))
        return jsonify([h.to_dict() for h in help_requests.list_requests(guard.current_user(), resolved=resolved)])

    @bp.route("/admin/help-requests/<int:request_id>/resolve", methods=["PATCH"])
    @guard.roles_required(Role.ADMIN)
    def resolve_help_request(request_id: int):
        return jsonify(help_requests.resolve(guard.current_user(), request_id).to_dict())

    app.register_blueprint(bp, url_prefix=app.config["API_PREFIX"])
