from __future__ import annotations

from datetime import time, timedelta

import pytest
from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError, PoolError

from agent_management.core.exceptions import ConflictError, ValidationError
from agent_management.database.bootstrap import (
    SCHEMA_PATH,
    _iter_sql_statements,
    _strip_comments,
    _strip_create_db_and_use,
)
from agent_management.database.connection import DatabaseConnection, DBConfig
from agent_management.database.mysql_base import (
    dump_json,
    load_json,
    normalize_mysql_time,
    translate_integrity_error,
)


def _dup(key):
    return IntegrityError(msg=f"Duplicate entry 'x' for key 'users.{key}'", errno=errorcode.ER_DUP_ENTRY)


@pytest.mark.parametrize(
    "key,message",
    [
        ("uq_users_email", "Email already in use"),
        ("uq_users_work_id", "Work ID already in use"),
        ("uq_attendance_user_date", "Attendance already recorded for this date"),
        ("uq_daily_reports_agent_date", "Daily report already submitted for this date"),
    ],
)
def test_duplicate_keys_become_conflicts(key, message):
    err = translate_integrity_error(_dup(key))

    assert isinstance(err, ConflictError)
    assert str(err) == message


def test_missing_reference_becomes_validation_error():
    err = translate_integrity_error(IntegrityError(msg="fk", errno=errorcode.ER_NO_REFERENCED_ROW_2))

    assert isinstance(err, ValidationError)


def test_other_integrity_errors_pass_through():
    err = IntegrityError(msg="null", errno=errorcode.ER_BAD_NULL_ERROR)

    assert translate_integrity_error(err) is err


def test_json_helpers():
    assert dump_json(None) is None
    assert load_json(dump_json([{"a": 1}])) == [{"a": 1}]
    assert load_json(b'{"k": "v"}') == {"k": "v"}
    assert load_json({"already": "parsed"}) == {"already": "parsed"}


@pytest.mark.parametrize(
    "raw,expected",
    [
        (time(8, 30), time(8, 30)),
        (timedelta(hours=9, minutes=15), time(9, 15)),
        ("17:45:10", time(17, 45, 10)),
        (None, None),
    ],
)
def test_normalize_mysql_time(raw, expected):
    assert normalize_mysql_time(raw) == expected


def test_schema_splits_into_create_statements():
    sql = _strip_comments(_strip_create_db_and_use(SCHEMA_PATH.read_text(encoding="utf-8")))

    statements = list(_iter_sql_statements(sql))

    assert len(statements) == 10
    assert all(s.upper().startswith("CREATE TABLE IF NOT EXISTS") for s in statements)


def test_splitter_keeps_quoted_semicolons():
    statements = list(_iter_sql_statements("INSERT INTO t VALUES ('a;b'); SELECT 1"))

    assert statements == ["INSERT INTO t VALUES ('a;b')", "SELECT 1"]


def test_db_config_from_mapping_defaults():
    cfg = DBConfig.from_mapping({"database": "agents", "port": "3307"})

    assert cfg.port == 3307
    assert cfg.host == "localhost"
    assert cfg.pool_size == 5


def test_one_connection_factory_per_target():
    a = DBConfig.from_mapping({"database": "one"})
    b = DBConfig.from_mapping({"database": "two"})

    assert DatabaseConnection.get_instance(a) is DatabaseConnection.get_instance(a)
    assert DatabaseConnection.get_instance(a) is not DatabaseConnection.get_instance(b)
    assert DatabaseConnection.get_instance(b).config.database == "two"


class _BusyPool:
    """Pool whose connections are all checked out for the first ``busy_for`` attempts."""

    def __init__(self, busy_for):
        self.busy_for = busy_for
        self.attempts = 0

    def get_connection(self):
        self.attempts += 1
        if self.attempts <= self.busy_for:
            raise PoolError("Failed getting connection; pool exhausted")
        return "pooled"


def _factory(pool, **cfg):
    factory = DatabaseConnection(DBConfig.from_mapping({"database": "busy", **cfg}))
    factory._pool = pool
    return factory


def test_exhausted_pool_waits_for_a_free_connection(monkeypatch):
    monkeypatch.setattr("agent_management.database.connection.time.sleep", lambda _: None)
    pool = _BusyPool(busy_for=3)

    assert _factory(pool, pool_timeout=5).connect() == "pooled"
    assert pool.attempts == 4


def test_exhausted_pool_falls_back_to_direct_connection(monkeypatch):
    opened = []
    monkeypatch.setattr("mysql.connector.connect", lambda **kw: opened.append(kw) or "direct")
    pool = _BusyPool(busy_for=10**6)

    assert _factory(pool, pool_timeout=0).connect() == "direct"
    assert opened[0]["database"] == "busy"
    assert pool.attempts == 1


def test_db_config_reads_pool_timeout():
    assert DBConfig.from_mapping({"pool_timeout": "0.5"}).pool_timeout == 0.5
    assert DBConfig.from_mapping({}).pool_timeout == 2.0
