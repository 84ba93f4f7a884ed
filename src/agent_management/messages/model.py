from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Message:
    message_id: int
    sender_id: int
    receiver_id: int
    content: str
    sent_at: datetime
    is_read: bool = False

    def other_party(self, user_id: int) -> int:
        return self.receiver_id if self.sender_id == user_id else self.sender_id

    def to_dict(self) -> dict:
        return {
            "id": self.message_id,
            "senderId": self.sender_id,
            "receiverId": self.receiver_id,
            "content": self.content,
            "read": self.is_read,
            "sentAt": self.sent_at.isoformat(),
        }
