from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class HelpRequest:
    """Public contact form submission, triaged by Admins."""

    request_id: int
    name: str
    email: str
    message: str
    resolved: bool = False
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.request_id,
            "name": self.name,
            "email": self.email,
            "message": self.message,
            "resolved": self.resolved,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
