from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Activity:
    """Append-only audit record."""

    activity_id: int
    user_id: int
    action: str
    details: str
    timestamp: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.activity_id,
            "userId": self.user_id,
            "action": self.action,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }
