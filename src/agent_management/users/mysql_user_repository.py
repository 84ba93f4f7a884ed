from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import User
from .repository import UserRepository

_COLUMNS = """
    id, first_name, last_name, email, work_id, national_id, phone_number,
    password_hash, role, manager_id, is_active, created_at
"""

# Model field -> column for partial updates.
_UPDATABLE = {
    "first_name": "first_name",
    "last_name": "last_name",
    "email": "email",
    "work_id": "work_id",
    "national_id": "national_id",
    "phone_number": "phone_number",
    "password_hash": "password_hash",
    "is_active": "is_active",
}


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["id"]),
        first_name=row["first_name"],
        last_name=row["last_name"],
        email=row["email"],
        work_id=row["work_id"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        manager_id=row.get("manager_id"),
        is_active=bool(row.get("is_active", True)),
        created_at=row.get("created_at"),
        national_id=row.get("national_id"),
        phone_number=row.get("phone_number"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, params: tuple) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {where}", params)
            row = fetchone(cur)
            return _to_user(row) if row else None

    def _get_many(self, where: str, params: tuple) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {where} ORDER BY id", params)
            return [_to_user(r) for r in fetchall(cur)]

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._get_one("id=%s", (int(user_id),))

    def get_by_email(self, email: str) -> Optional[User]:
        return self._get_one("email=%s", (email,))

    def get_by_work_id(self, work_id: str) -> Optional[User]:
        return self._get_one("work_id=%s", (work_id,))

    def get_by_work_id_and_email(self, work_id: str, email: str) -> Optional[User]:
        return self._get_one("work_id=%s AND email=%s", (work_id, email))

    def count(self) -> int:
        with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
            cur.execute("SELECT COUNT(*) FROM users")
            (total,) = cur.fetchone()
            return int(total)

    def list_by_role(self, role: Optional[Role] = None) -> Sequence[User]:
        if role is None:
            return self._get_many("1=1", ())
        return self._get_many("role=%s", (role.value,))

    def list_by_manager(self, manager_id: int) -> Sequence[User]:
        return self._get_many("manager_id=%s", (int(manager_id),))

    def list_by_ids(self, user_ids: Iterable[int]) -> Sequence[User]:
        ids = sorted({int(i) for i in user_ids})
        if not ids:
            return []
        return self._get_many(f"id IN ({in_clause(ids)})", tuple(ids))

    def create_user(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        work_id: str,
        password_hash: str,
        role: Role,
        manager_id: Optional[int],
        national_id: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(first_name, last_name, email, work_id, national_id, phone_number,
                                  password_hash, role, manager_id, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (first_name, last_name, email, work_id, national_id, phone_number, password_hash, role.value, manager_id),
            )
            return int(cur.lastrowid)

    def update_user(self, user_id: int, changes: Mapping[str, object]) -> bool:
        sets = []
        params: list[object] = []
        for field, value in changes.items():
            column = _UPDATABLE.get(field)
            if column is None:
                raise ValueError(f"Field is not updatable: {field}")
            sets.append(f"{column}=%s")
            params.append(value)
        if not sets:
            return self.get_by_id(user_id) is not None

        params.append(int(user_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE users SET {', '.join(sets)} WHERE id=%s", tuple(params))
            # rowcount is 0 when values are unchanged; existence is what callers need.
            cur.execute("SELECT 1 FROM users WHERE id=%s", (int(user_id),))
            return fetchone(cur) is not None

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        return self.update_user(user_id, {"is_active": bool(is_active)})
