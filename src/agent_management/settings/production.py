import os

from . import env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

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

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

SESSION_DAYS = int(os.getenv("SESSION_DAYS", "1"))
SESSION_COOKIE_SECURE = True

STRICT_MANAGER_MESSAGING = env_flag("STRICT_MANAGER_MESSAGING", "0")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
