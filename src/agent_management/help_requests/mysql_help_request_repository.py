from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import HelpRequest
from .repository import HelpRequestRepository

_COLUMNS = "id, name, email, message, resolved, created_at"


def _to_request(r: dict) -> HelpRequest:
    return HelpRequest(
        request_id=int(r["id"]),
        name=r["name"],
        email=r["email"],
        message=r["message"],
        resolved=bool(r.get("resolved")),
        created_at=r.get("created_at"),
    )


class MySQLHelpRequestRepository(HelpRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, request_id: int) -> Optional[HelpRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM help_requests WHERE id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def list_requests(self, *, resolved: Optional[bool] = None) -> Sequence[HelpRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            if resolved is None:
                cur.execute(f"SELECT {_COLUMNS} FROM help_requests ORDER BY created_at DESC, id DESC")
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM help_requests WHERE resolved=%s ORDER BY created_at DESC, id DESC",
                    (1 if resolved else 0,),
                )
            return [_to_request(r) for r in fetchall(cur)]

    def create_request(self, *, name: str, email: str, message: str, created_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO help_requests(name, email, message, resolved, created_at) VALUES(%s,%s,%s,0,%s)",
                (name, email, message, created_at),
            )
            return int(cur.lastrowid)

    def mark_resolved(self, request_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE help_requests SET resolved=1 WHERE id=%s", (int(request_id),))
            cur.execute("SELECT 1 FROM help_requests WHERE id=%s", (int(request_id),))
            return fetchone(cur) is not None
