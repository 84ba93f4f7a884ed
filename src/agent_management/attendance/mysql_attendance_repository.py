from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "id, user_id, work_date, sector, location, check_in_time"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        check_in_time=r["check_in_time"],
        sector=r.get("sector"),
        location=r.get("location"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE user_id=%s AND work_date=%s",
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_by_date(self, work_date: date, *, user_ids: Optional[Iterable[int]] = None) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            if user_ids is None:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM attendance WHERE work_date=%s ORDER BY check_in_time",
                    (work_date,),
                )
            else:
                ids = [int(u) for u in user_ids]
                if not ids:
                    return []
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM attendance
                    WHERE work_date=%s AND user_id IN ({in_clause(ids)})
                    ORDER BY check_in_time
                    """,
                    (work_date, *ids),
                )
            return [_to_record(r) for r in fetchall(cur)]

    def create_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: datetime,
        sector: Optional[str] = None,
        location: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(user_id, work_date, sector, location, check_in_time)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(user_id), work_date, sector, location, check_in_time),
            )
            return int(cur.lastrowid)
