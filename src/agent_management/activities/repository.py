from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Activity


class ActivityRepository(Protocol):
    """Append-only: no update or delete."""

    def create_activity(self, *, user_id: int, action: str, details: str, timestamp: datetime) -> int:
        raise NotImplementedError

    def get_by_id(self, activity_id: int) -> Optional[Activity]:
        raise NotImplementedError

    def list_recent(self, *, offset: int, limit: int) -> Sequence[Activity]:
        """Newest first."""

        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError
