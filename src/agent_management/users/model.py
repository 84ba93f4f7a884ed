from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: plain data object (no DB access code). ``password_hash`` never leaves the service layer.
    """

    user_id: int
    first_name: str
    last_name: str
    email: str
    work_id: str
    password_hash: str
    role: Role
    manager_id: Optional[int]
    is_active: bool = True
    created_at: Optional[datetime] = None
    national_id: Optional[str] = None
    phone_number: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_summary(self) -> dict:
        return {
            "id": self.user_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "workId": self.work_id,
            "role": self.role.value,
            "isActive": self.is_active,
        }

    def to_dict(self) -> dict:
        data = self.to_summary()
        data.update(
            {
                "nationalId": self.national_id,
                "phoneNumber": self.phone_number,
                "managerId": self.manager_id,
                "createdAt": self.created_at.isoformat() if self.created_at else None,
            }
        )
        return data

    def to_contact(self) -> dict:
        """Short form used in message payloads and recipient pickers."""

        return {
            "id": self.user_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "role": self.role.value,
            "workId": self.work_id,
        }
