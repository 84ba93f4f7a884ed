from __future__ import annotations

from typing import Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AgentGroup
from .repository import GroupRepository

_UPDATABLE = {"name": "name", "leader_id": "leader_id", "is_active": "is_active"}


def _to_group(row: dict) -> AgentGroup:
    return AgentGroup(
        group_id=int(row["id"]),
        name=row["name"],
        sales_staff_id=int(row["sales_staff_id"]),
        leader_id=row.get("leader_id"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLGroupRepository(GroupRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, group_id: int) -> Optional[AgentGroup]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, name, sales_staff_id, leader_id, is_active FROM agent_groups WHERE id=%s",
                (int(group_id),),
            )
            row = fetchone(cur)
            return _to_group(row) if row else None

    def _list_where(self, column: str, value: int) -> Sequence[AgentGroup]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT id, name, sales_staff_id, leader_id, is_active FROM agent_groups WHERE {column}=%s ORDER BY id",
                (int(value),),
            )
            return [_to_group(r) for r in fetchall(cur)]

    def list_by_sales_staff(self, sales_staff_id: int) -> Sequence[AgentGroup]:
        return self._list_where("sales_staff_id", sales_staff_id)

    def list_by_leader(self, leader_id: int) -> Sequence[AgentGroup]:
        return self._list_where("leader_id", leader_id)

    def create_group(self, *, name: str, sales_staff_id: int, leader_id: Optional[int]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO agent_groups(name, sales_staff_id, leader_id, is_active) VALUES(%s,%s,%s,1)",
                (name, int(sales_staff_id), leader_id),
            )
            return int(cur.lastrowid)

    def update_group(self, group_id: int, changes: Mapping[str, object]) -> bool:
        sets = []
        params: list[object] = []
        for field, value in changes.items():
            column = _UPDATABLE.get(field)
            if column is None:
                raise ValueError(f"Field is not updatable: {field}")
            sets.append(f"{column}=%s")
            params.append(value)
        with db_cursor(self._conn_factory) as (_, cur):
            if sets:
                cur.execute(f"UPDATE agent_groups SET {', '.join(sets)} WHERE id=%s", (*params, int(group_id)))
            cur.execute("SELECT 1 FROM agent_groups WHERE id=%s", (int(group_id),))
            return fetchone(cur) is not None

    def add_member(self, *, group_id: int, agent_id: int) -> None:
        # The (group_id, agent_id) primary key turns a duplicate into ConflictError.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO agent_group_members(group_id, agent_id) VALUES(%s,%s)",
                (int(group_id), int(agent_id)),
            )

    def remove_member(self, *, group_id: int, agent_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM agent_group_members WHERE group_id=%s AND agent_id=%s",
                (int(group_id), int(agent_id)),
            )
            return cur.rowcount > 0

    def list_member_ids(self, group_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
            cur.execute(
                "SELECT agent_id FROM agent_group_members WHERE group_id=%s ORDER BY agent_id",
                (int(group_id),),
            )
            return [int(r[0]) for r in cur.fetchall()]
