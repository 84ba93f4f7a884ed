from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Client:
    """An insurance client registered by an Agent or TeamLeader."""

    client_id: int
    agent_id: int
    first_name: str
    last_name: str
    national_id: Optional[str] = None
    phone: Optional[str] = None
    insurance_product: Optional[str] = None
    payment_method: Optional[str] = None
    fee_paid: Optional[Decimal] = None
    location: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.client_id,
            "agentId": self.agent_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "nationalId": self.national_id,
            "phone": self.phone,
            "insuranceProduct": self.insurance_product,
            "paymentMethod": self.payment_method,
            "feePaid": str(self.fee_paid) if self.fee_paid is not None else None,
            "location": self.location,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
