from __future__ import annotations

from datetime import datetime, time
from typing import Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import AttendanceTimeFrame
from .repository import TimeFrameRepository

_COLUMNS = "id, manager_id, start_time, end_time, created_at, updated_at"
_UPDATABLE = {"start_time": "start_time", "end_time": "end_time"}


def _to_frame(r: dict) -> AttendanceTimeFrame:
    return AttendanceTimeFrame(
        frame_id=int(r["id"]),
        manager_id=int(r["manager_id"]),
        start_time=normalize_mysql_time(r.get("start_time")),
        end_time=normalize_mysql_time(r.get("end_time")),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLTimeFrameRepository(TimeFrameRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, frame_id: int) -> Optional[AttendanceTimeFrame]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_time_frames WHERE id=%s", (int(frame_id),))
            r = fetchone(cur)
            return _to_frame(r) if r else None

    def list_by_manager(self, manager_id: int) -> Sequence[AttendanceTimeFrame]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_time_frames WHERE manager_id=%s ORDER BY id",
                (int(manager_id),),
            )
            return [_to_frame(r) for r in fetchall(cur)]

    def create_time_frame(
        self, *, manager_id: int, start_time: Optional[time], end_time: Optional[time], created_at: datetime
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_time_frames(manager_id, start_time, end_time, created_at, updated_at)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(manager_id), start_time, end_time, created_at, created_at),
            )
            return int(cur.lastrowid)

    def update_time_frame(self, frame_id: int, changes: Mapping[str, object], *, updated_at: datetime) -> bool:
        sets = []
        params: list[object] = []
        for field, value in changes.items():
            column = _UPDATABLE.get(field)
            if column is None:
                raise ValueError(f"Field is not updatable: {field}")
            sets.append(f"{column}=%s")
            params.append(value)
        sets.append("updated_at=%s")
        params.append(updated_at)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE attendance_time_frames SET {', '.join(sets)} WHERE id=%s", (*params, int(frame_id)))
            cur.execute("SELECT 1 FROM attendance_time_frames WHERE id=%s", (int(frame_id),))
            return fetchone(cur) is not None
