from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import ClassVar, Dict, Optional

import mysql.connector
from mysql.connector import pooling
from mysql.connector.errors import PoolError

logger = logging.getLogger(__name__)

_POOL_POLL_SECONDS = 0.05


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = 5
    pool_timeout: float = 2.0

    @classmethod
    def from_mapping(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "agent_management")),
            pool_size=int(db_config.get("pool_size", 5)),
            pool_timeout=float(db_config.get("pool_timeout", 2.0)),
        )

    def connect_kwargs(self) -> dict:
        return {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "database": self.database,
        }


class DatabaseConnection:
    """One connection pool per database target.

    The pool is opened on the first ``connect`` so the app can start before MySQL is reachable.
    Closing a pooled connection hands it back to the pool. When every pooled connection is busy,
    ``connect`` waits up to ``pool_timeout`` seconds for one to come back and then opens a
    short-lived direct connection instead.
    """

    _instances: ClassVar[Dict[DBConfig, "DatabaseConnection"]] = {}
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        with cls._lock:
            instance = cls._instances.get(config)
            if instance is None:
                instance = cls._instances[config] = DatabaseConnection(config)
            return instance

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        with self._lock:
            if self._pool is None:
                cfg = self._config
                self._pool = pooling.MySQLConnectionPool(
                    pool_name=f"agent_management_{cfg.database}",
                    pool_size=cfg.pool_size,
                    **cfg.connect_kwargs(),
                )
                logger.info("Opened MySQL pool for %s@%s/%s (size=%d)", cfg.user, cfg.host, cfg.database, cfg.pool_size)
            return self._pool

    def connect(self):
        pool = self._get_pool()
        deadline = time.monotonic() + self._config.pool_timeout
        while True:
            try:
                return pool.get_connection()
            except PoolError:
                if time.monotonic() >= deadline:
                    break
                time.sleep(_POOL_POLL_SECONDS)
        logger.warning(
            "MySQL pool for %s exhausted after %.1fs; opening a direct connection",
            self._config.database,
            self._config.pool_timeout,
        )
        return mysql.connector.connect(**self._config.connect_kwargs())
