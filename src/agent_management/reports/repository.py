from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Optional, Protocol, Sequence

from .model import DailyReport


class DailyReportRepository(Protocol):
    def get_for_agent_and_date(self, agent_id: int, report_date: date) -> Optional[DailyReport]:
        raise NotImplementedError

    def list_by_date(self, report_date: date, *, agent_ids: Optional[Iterable[int]] = None) -> Sequence[DailyReport]:
        raise NotImplementedError

    def create_report(
        self,
        *,
        agent_id: int,
        report_date: date,
        comment: Optional[str],
        clients_data: Any,
        created_at: datetime,
    ) -> int:
        """A second report for the same (agent, date) raises ConflictError."""

        raise NotImplementedError
