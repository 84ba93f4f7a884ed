from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import HelpRequest


class HelpRequestRepository(Protocol):
    def get_by_id(self, request_id: int) -> Optional[HelpRequest]:
        raise NotImplementedError

    def list_requests(self, *, resolved: Optional[bool] = None) -> Sequence[HelpRequest]:
        """Newest first; ``resolved=None`` returns both states."""

        raise NotImplementedError

    def create_request(self, *, name: str, email: str, message: str, created_at: datetime) -> int:
        raise NotImplementedError

    def mark_resolved(self, request_id: int) -> bool:
        raise NotImplementedError
