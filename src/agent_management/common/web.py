from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, g, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DomainError, ValidationError
from ..users.model import User
from ..users.service import AuthService

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def error_body(message: str, code: str) -> dict:
    return {"message": message, "code": code}


def register_error_handlers(app: Flask) -> None:
    """Map domain errors to JSON responses with their status codes."""

    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        if error.status_code in (401, 403):
            logger.warning("%s %s -> %s: %s", request.method, request.path, error.status_code, error)
        return jsonify(error_body(str(error) or error.code, error.code)), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        code = (error.name or "HTTP_ERROR").upper().replace(" ", "_")
        return jsonify(error_body(error.description or error.name, code)), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify(error_body("An unexpected error occurred", "INTERNAL_ERROR")), 500


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def query_int(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


class SessionGuard:
    """Resolves the session user from the store on every request."""

    def __init__(self, auth_service: AuthService):
        self._auth = auth_service

    def sign_in(self, user: User) -> None:
        session.clear()
        session.permanent = True
        session["user_id"] = user.user_id
        session["role"] = user.role.value

    def sign_out(self) -> None:
        session.clear()
        g.pop("current_user", None)

    def current_user(self) -> User:
        cached: Optional[User] = g.get("current_user")
        if cached is not None:
            return cached
        user = self._auth.resolve_session_user(session.get("user_id"))
        g.current_user = user
        return user

    def login_required(self, view):
        @wraps(view)
        def wrapper(*args: Any, **kwargs: Any):
            self.current_user()
            return view(*args, **kwargs)

        return wrapper

    def roles_required(self, *roles: Role):
        """Like ``login_required`` but refuses any role outside ``roles`` with 403."""

        def decorator(view):
            @wraps(view)
            def wrapper(*args: Any, **kwargs: Any):
                user = self.current_user()
                if user.role not in roles:
                    raise AuthorizationError("Forbidden: Insufficient permissions")
                return view(*args, **kwargs)

            return wrapper

        return decorator
