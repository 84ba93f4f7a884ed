from __future__ import annotations

from flask import Blueprint, Flask, jsonify, request

from ..common.web import json_body
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError


def _parse_role(value, *, allowed=None, default=None) -> Role:
    if value in (None, "") and default is not None:
        return default
    try:
        role = Role(value)
    except ValueError:
        raise ValidationError("Invalid role")
    if allowed is not None and role not in allowed:
        raise ValidationError("Invalid role")
    return role


def register(app: Flask, container: Container) -> None:
    bp = Blueprint("users", __name__)
    guard = container.session_guard
    users = container.user_service

    def _create(role: Role, data: dict):
        created = users.create_subordinate(
            guard.current_user(),
            role=role,
            first_name=data.get("firstName"),
            last_name=data.get("lastName"),
            email=data.get("email"),
            work_id=data.get("workId"),
            password=data.get("password"),
            national_id=data.get("nationalId"),
            phone_number=data.get("phoneNumber"),
        )
        return jsonify(created.to_dict()), 201

    def _update(user_id: int, role_family: Role):
        updated = users.update_subordinate(
            guard.current_user(), user_id, role_family=role_family, changes=json_body()
        )
        return jsonify(updated.to_dict())

    def _deactivate(user_id: int, role_family: Role):
        users.deactivate_subordinate(guard.current_user(), user_id, role_family=role_family)
        return "", 204

    # --- auth ---

    @bp.route("/login", methods=["POST"])
    def login():
        data = json_body()
        user = container.auth_service.authenticate(data.get("workId"), data.get("email"), data.get("password"))
        guard.sign_in(user)
        return jsonify(user.to_summary())

    @bp.route("/logout", methods=["POST"])
    def logout():
        try:
            user = guard.current_user()
        except AuthenticationError:
            user = None
        if user is not None:
            container.auth_service.logout(user)
        guard.sign_out()
        return jsonify({"message": "Logged out successfully"})

    @bp.route("/user", methods=["GET"])
    @guard.login_required
    def current_user():
        return jsonify(guard.current_user().to_summary())

    # --- admin ---

    @bp.route("/admin/users", methods=["GET"])
    @guard.roles_required(Role.ADMIN)
    def admin_users():
        role = request.args.get("role")
        role = _parse_role(role) if role else None
        return jsonify([u.to_dict() for u in users.list_users(guard.current_user(), role=role)])

    @bp.route("/admin/users/<int:user_id>/activate", methods=["POST"])
    @guard.roles_required(Role.ADMIN)
    def activate_user(user_id: int):
        return jsonify(users.set_active(guard.current_user(), user_id, is_active=True).to_dict())

    @bp.route("/admin/users/<int:user_id>/deactivate", methods=["POST"])
    @guard.roles_required(Role.ADMIN)
    def deactivate_user(user_id: int):
        return jsonify(users.set_active(guard.current_user(), user_id, is_active=False).to_dict())

    @bp.route("/admin/managers", methods=["GET"])
    @guard.roles_required(Role.ADMIN)
    def list_managers():
        return jsonify([u.to_dict() for u in users.list_in_scope(guard.current_user(), [Role.MANAGER])])

    @bp.route("/admin/managers", methods=["POST"])
    @guard.roles_required(Role.ADMIN)
    def create_manager():
        return _create(Role.MANAGER, json_body())

    @bp.route("/admin/managers/<int:user_id>", methods=["PATCH"])
    @guard.roles_required(Role.ADMIN)
    def update_manager(user_id: int):
        return _update(user_id, Role.MANAGER)

    @bp.route("/admin/managers/<int:user_id>", methods=["DELETE"])
    @guard.roles_required(Role.ADMIN)
    def delete_manager(user_id: int):
        return _deactivate(user_id, Role.MANAGER)

    # --- manager ---

    @bp.route("/manager/sales-staff", methods=["GET"])
    @guard.login_required
    def list_sales_staff():
        return jsonify([u.to_dict() for u in users.list_in_scope(guard.current_user(), [Role.SALES_STAFF])])

    @bp.route("/manager/sales-staff", methods=["POST"])
    @guard.login_required
    def create_sales_staff():
        return _create(Role.SALES_STAFF, json_body())

    @bp.route("/manager/sales-staff/<int:user_id>", methods=["PATCH"])
    @guard.login_required
    def update_sales_staff(user_id: int):
        return _update(user_id, Role.SALES_STAFF)

    @bp.route("/manager/sales-staff/<int:user_id>", methods=["DELETE"])
    @guard.login_required
    def delete_sales_staff(user_id: int):
        return _deactivate(user_id, Role.SALES_STAFF)

    @bp.route("/manager/agents", methods=["GET"])
    @guard.login_required
    def manager_agents():
        return jsonify([u.to_dict() for u in users.list_in_scope(guard.current_user(), Role.field_roles())])

    # --- sales staff ---

    @bp.route("/sales-staff/agents", methods=["GET"])
    @guard.login_required
    def list_agents():
        return jsonify([u.to_dict() for u in users.list_in_scope(guard.current_user(), Role.field_roles())])

    @bp.route("/sales-staff/agents", methods=["POST"])
    @guard.login_required
    def create_agent():
        data = json_body()
        role = _parse_role(data.get("role"), allowed=Role.field_roles(), default=Role.AGENT)
        return _create(role, data)

    @bp.route("/sales-staff/agents/<int:user_id>", methods=["PATCH"])
    @guard.login_required
    def update_agent(user_id: int):
        return _update(user_id, Role.AGENT)

    @bp.route("/sales-staff/agents/<int:user_id>", methods=["DELETE"])
    @guard.login_required
    def delete_agent(user_id: int):
        return _deactivate(user_id, Role.AGENT)

    app.register_blueprint(bp, url_prefix=app.config["API_PREFIX"])
