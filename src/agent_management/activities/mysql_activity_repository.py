from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Activity
from .repository import ActivityRepository


def _to_activity(row: dict) -> Activity:
    return Activity(
        activity_id=int(row["id"]),
        user_id=int(row["user_id"]),
        action=row["action"],
        details=row["details"],
        timestamp=row["created_at"],
    )


class MySQLActivityRepository(ActivityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_activity(self, *, user_id: int, action: str, details: str, timestamp: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO activities(user_id, action, details, created_at) VALUES(%s,%s,%s,%s)",
                (int(user_id), action, details, timestamp),
            )
            return int(cur.lastrowid)

    def get_by_id(self, activity_id: int) -> Optional[Activity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, user_id, action, details, created_at FROM activities WHERE id=%s",
                (int(activity_id),),
            )
            row = fetchone(cur)
            return _to_activity(row) if row else None

    def list_recent(self, *, offset: int, limit: int) -> Sequence[Activity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, user_id, action, details, created_at
                FROM activities
                ORDER BY created_at DESC, id DESC
                LIMIT %s OFFSET %s
                """,
                (int(limit), int(offset)),
            )
            return [_to_activity(r) for r in fetchall(cur)]

    def count(self) -> int:
        with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
            cur.execute("SELECT COUNT(*) FROM activities")
            (total,) = cur.fetchone()
            return int(total)
