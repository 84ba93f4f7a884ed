from __future__ import annotations

from flask import Blueprint, Flask, jsonify

from ..common.web import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    bp = Blueprint("groups", __name__)
    guard = container.session_guard
    groups = container.group_service

    @bp.route("/sales-staff/agent-groups", methods=["GET"])
    @guard.login_required
    def list_groups():
        return jsonify([g.to_dict() for g in groups.list_groups(guard.current_user())])

    @bp.route("/sales-staff/agent-groups", methods=["POST"])
    @guard.login_required
    def create_group():
        data = json_body()
        group = groups.create_group(guard.current_user(), name=data.get("name"), leader_id=data.get("leaderId"))
        return jsonify(group.to_dict()), 201

    @bp.route("/sales-staff/agent-groups/<int:group_id>", methods=["PATCH"])
    @guard.login_required
    def update_group(group_id: int):
        return jsonify(groups.update_group(guard.current_user(), group_id, json_body()).to_dict())

    @bp.route("/sales-staff/agent-groups/<int:group_id>/members", methods=["GET"])
    @guard.login_required
    def list_members(group_id: int):
        return jsonify([m.to_dict() for m in groups.list_members(guard.current_user(), group_id)])

    @bp.route("/sales-staff/agent-groups/<int:group_id>/members", methods=["POST"])
    @guard.login_required
    def add_member(group_id: int):
        members = groups.add_member(guard.current_user(), group_id, json_body().get("agentId"))
        return jsonify([m.to_dict() for m in members]), 201

    @bp.route("/sales-staff/agent-groups/<int:group_id>/members/<int:agent_id>", methods=["DELETE"])
    @guard.login_required
    def remove_member(group_id: int, agent_id: int):
        groups.remove_member(guard.current_user(), group_id, agent_id)
        return "", 204

    @bp.route("/leader/groups", methods=["GET"])
    @guard.login_required
    def leader_groups():
        return jsonify([g.to_dict() for g in groups.list_groups(guard.current_user())])

    @bp.route("/leader/group-members", methods=["GET"])
    @guard.login_required
    def leader_group_members():
        return jsonify(groups.members_overview(guard.current_user()))

    app.register_blueprint(bp, url_prefix=app.config["API_PREFIX"])
