from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from .model import Client


class ClientRepository(Protocol):
    def get_by_id(self, client_id: int) -> Optional[Client]:
        raise NotImplementedError

    def list_by_agents(self, agent_ids: Optional[Iterable[int]]) -> Sequence[Client]:
        """Clients of the given agents; ``None`` lists every client."""

        raise NotImplementedError

    def create_client(
        self,
        *,
        agent_id: int,
        first_name: str,
        last_name: str,
        national_id: Optional[str],
        phone: Optional[str],
        insurance_product: Optional[str],
        payment_method: Optional[str],
        fee_paid: Optional[Decimal],
        location: Optional[str],
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def update_client(self, client_id: int, changes: Mapping[str, object], *, updated_at: datetime) -> bool:
        raise NotImplementedError

    def delete_client(self, client_id: int) -> bool:
        raise NotImplementedError
