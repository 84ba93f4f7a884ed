from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Message
from .repository import MessageRepository

_COLUMNS = "id, sender_id, receiver_id, content, is_read, sent_at"


def _to_message(r: dict) -> Message:
    return Message(
        message_id=int(r["id"]),
        sender_id=int(r["sender_id"]),
        receiver_id=int(r["receiver_id"]),
        content=r["content"],
        sent_at=r["sent_at"],
        is_read=bool(r.get("is_read")),
    )


class MySQLMessageRepository(MessageRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, message_id: int) -> Optional[Message]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM messages WHERE id=%s", (int(message_id),))
            r = fetchone(cur)
            return _to_message(r) if r else None

    def create_message(self, *, sender_id: int, receiver_id: int, content: str, sent_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO messages(sender_id, receiver_id, content, is_read, sent_at) VALUES(%s,%s,%s,0,%s)",
                (int(sender_id), int(receiver_id), content, sent_at),
            )
            return int(cur.lastrowid)

    def list_for_user(self, user_id: int) -> Sequence[Message]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM messages
                WHERE sender_id=%s OR receiver_id=%s
                ORDER BY sent_at, id
                """,
                (int(user_id), int(user_id)),
            )
            return [_to_message(r) for r in fetchall(cur)]

    def list_between(self, user_id: int, other_id: int) -> Sequence[Message]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM messages
                WHERE (sender_id=%s AND receiver_id=%s) OR (sender_id=%s AND receiver_id=%s)
                ORDER BY sent_at, id
                """,
                (int(user_id), int(other_id), int(other_id), int(user_id)),
            )
            return [_to_message(r) for r in fetchall(cur)]

    def mark_read(self, message_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE messages SET is_read=1 WHERE id=%s", (int(message_id),))
            cur.execute("SELECT 1 FROM messages WHERE id=%s", (int(message_id),))
            return fetchone(cur) is not None
