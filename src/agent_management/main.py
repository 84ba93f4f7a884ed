from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .activities.controller import register as register_activities
from .attendance.controller import register as register_attendance
from .clients.controller import register as register_clients
from .common.web import configure_logging, register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_SESSION_DAYS
from .database.bootstrap import apply_schema, ensure_default_users, list_tables
from .groups.controller import register as register_groups
from .help_requests.controller import register as register_help_requests
from .messages.controller import register as register_messages
from .reports.controller import register as register_reports
from .settings import get_settings_module
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Pass ``container`` to run against pre-built repositories (tests); otherwise the
    MySQL container is built from the active settings module.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["API_PREFIX"] = getattr(settings, "API_PREFIX", "/api")
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SECURE"] = bool(getattr(settings, "SESSION_COOKIE_SECURE", False))
    app.permanent_session_lifetime = timedelta(days=int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS)))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_default_users(db_config)

        container = build_container(
            db_config=db_config,
            strict_manager_messaging=bool(getattr(settings, "STRICT_MANAGER_MESSAGING", False)),
        )

    app.extensions["agent_management"] = container

    register_error_handlers(app)
    register_users(app, container)
    register_groups(app, container)
    register_clients(app, container)
    register_attendance(app, container)
    register_reports(app, container)
    register_help_requests(app, container)
    register_messages(app, container)
    register_activities(app, container)

    return app
