from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Message


class MessageRepository(Protocol):
    def get_by_id(self, message_id: int) -> Optional[Message]:
        raise NotImplementedError

    def create_message(self, *, sender_id: int, receiver_id: int, content: str, sent_at: datetime) -> int:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[Message]:
        """Sent and received, oldest first."""

        raise NotImplementedError

    def list_between(self, user_id: int, other_id: int) -> Sequence[Message]:
        raise NotImplementedError

    def mark_read(self, message_id: int) -> bool:
        raise NotImplementedError
