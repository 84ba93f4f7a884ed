from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, in_clause, load_json
from .model import DailyReport
from .repository import DailyReportRepository

_COLUMNS = "id, agent_id, report_date, comment, clients_data, created_at"


def _to_report(r: dict) -> DailyReport:
    return DailyReport(
        report_id=int(r["id"]),
        agent_id=int(r["agent_id"]),
        report_date=r["report_date"],
        comment=r.get("comment"),
        clients_data=load_json(r.get("clients_data")),
        created_at=r.get("created_at"),
    )


class MySQLDailyReportRepository(DailyReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_agent_and_date(self, agent_id: int, report_date: date) -> Optional[DailyReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM daily_reports WHERE agent_id=%s AND report_date=%s",
                (int(agent_id), report_date),
            )
            r = fetchone(cur)
            return _to_report(r) if r else None

    def list_by_date(self, report_date: date, *, agent_ids: Optional[Iterable[int]] = None) -> Sequence[DailyReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            if agent_ids is None:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM daily_reports WHERE report_date=%s ORDER BY created_at",
                    (report_date,),
                )
            else:
                ids = [int(a) for a in agent_ids]
                if not ids:
                    return []
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM daily_reports
                    WHERE report_date=%s AND agent_id IN ({in_clause(ids)})
                    ORDER BY created_at
                    """,
                    (report_date, *ids),
                )
            return [_to_report(r) for r in fetchall(cur)]

    def create_report(
        self,
        *,
        agent_id: int,
        report_date: date,
        comment: Optional[str],
        clients_data: Any,
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO daily_reports(agent_id, report_date, comment, clients_data, created_at)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(agent_id), report_date, comment, dump_json(clients_data), created_at),
            )
            return int(cur.lastrowid)
