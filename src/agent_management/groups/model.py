from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AgentGroup:
    """A team of agents owned by the SalesStaff that created it."""

    group_id: int
    name: str
    sales_staff_id: int
    leader_id: Optional[int]
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.group_id,
            "name": self.name,
            "salesStaffId": self.sales_staff_id,
            "leaderId": self.leader_id,
            "isActive": self.is_active,
        }

