from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional


@dataclass(frozen=True)
class DailyReport:
    """End-of-day summary; ``clients_data`` is stored as opaque JSON."""

    report_id: int
    agent_id: int
    report_date: date
    comment: Optional[str] = None
    clients_data: Any = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.report_id,
            "agentId": self.agent_id,
            "date": self.report_date.isoformat(),
            "comment": self.comment,
            "clientsData": self.clients_data,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
