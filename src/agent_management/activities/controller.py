from __future__ import annotations

from flask import Blueprint, Flask, jsonify

from ..common.web import json_body, query_int
from ..container import Container
from ..core.constants import DEFAULT_ACTIVITY_LIMIT, DEFAULT_ACTIVITY_PAGE
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    bp = Blueprint("activities", __name__)
    guard = container.session_guard
    activities = container.activity_service

    @bp.route("/admin/activities", methods=["GET"])
    @guard.roles_required(Role.ADMIN)
    def list_activities():
        page = query_int("page", DEFAULT_ACTIVITY_PAGE)
        limit = query_int("limit", DEFAULT_ACTIVITY_LIMIT)
        return jsonify(activities.list_page(guard.current_user(), page=page, limit=limit))

    @bp.route("/admin/activities", methods=["POST"])
    @guard.roles_required(Role.ADMIN)
    def log_activity():
        data = json_body()
        created = activities.log_manual(guard.current_user(), action=data.get("action"), details=data.get("details"))
        return jsonify(created.to_dict()), 201

    app.register_blueprint(bp, url_prefix=app.config["API_PREFIX"])
