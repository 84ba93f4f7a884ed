from __future__ import annotations

import json
import re
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.exceptions import ConflictError, ValidationError
from .connection import DatabaseConnection

# Unique index name (see schema.sql) -> message surfaced to the caller.
CONFLICT_MESSAGES = {
    "uq_users_email": "Email already in use",
    "uq_users_work_id": "Work ID already in use",
    "uq_attendance_user_date": "Attendance already recorded for this date",
    "uq_daily_reports_agent_date": "Daily report already submitted for this date",
    "PRIMARY": "Agent is already a member of this group",
}

_DUP_KEY_RE = re.compile(r"for key '(?:[\w]+\.)?(?P<key>[\w]+)'")


def duplicate_key_name(err: IntegrityError) -> Optional[str]:
    match = _DUP_KEY_RE.search(str(getattr(err, "msg", "") or err))
    return match.group("key") if match else None


def translate_integrity_error(err: IntegrityError) -> Exception:
    if err.errno == errorcode.ER_DUP_ENTRY:
        key = duplicate_key_name(err)
        return ConflictError(CONFLICT_MESSAGES.get(key or "", "Duplicate record"))
    if err.errno in (errorcode.ER_NO_REFERENCED_ROW, errorcode.ER_NO_REFERENCED_ROW_2):
        return ValidationError("Referenced record does not exist")
    return err


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except IntegrityError as e:
        conn.rollback()
        raise translate_integrity_error(e) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(values) -> str:
    """Placeholder list for ``IN (...)``; callers must pass a non-empty sequence."""
    return ", ".join(["%s"] * len(values))


def load_json(value: Any) -> Any:
    if value is None or isinstance(value, (dict, list)):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    return json.loads(value)


def dump_json(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value)


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=hours, minute=minutes, second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
