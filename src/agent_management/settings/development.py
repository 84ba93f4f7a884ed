import os

from . import env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "agent_management"),
    "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
    "pool_timeout": float(os.getenv("DB_POOL_TIMEOUT", "2")),
}

API_PREFIX = os.getenv("API_PREFIX", "/api")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

SESSION_DAYS = int(os.getenv("SESSION_DAYS", "1"))

# SalesStaff -> Manager messaging: when enabled, only the SalesStaff's own manager.
STRICT_MANAGER_MESSAGING = env_flag("STRICT_MANAGER_MESSAGING", "0")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
# Optional: also seed the default demo users on an empty database
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "1")
