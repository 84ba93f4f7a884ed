from __future__ import annotations

import importlib

from dotenv import load_dotenv

from agent_management.common.web import configure_logging
from agent_management.database.bootstrap import ensure_default_users
from agent_management.settings import get_settings_module


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    created = ensure_default_users(db_config)
    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    if created:
        print(f"OK: Seeded default users -> {target}")
    else:
        print(f"SKIP: users table is not empty -> {target}")


if __name__ == "__main__":
    main()
