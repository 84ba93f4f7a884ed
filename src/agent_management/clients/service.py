from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from ..authorization.policy import Action, AuthorizationPolicy, Resource
from ..common.datetime_utils import now_local
from ..common.validators import optional_decimal, optional_str, require_non_empty
from ..core.constants import (
    CODE_MAX_LENGTH,
    FEE_DECIMAL_PLACES,
    FEE_MAX_DIGITS,
    LABEL_MAX_LENGTH,
    LONG_TEXT_MAX_LENGTH,
    NAME_MAX_LENGTH,
)
from ..core.exceptions import NotFoundError
from ..users.model import User
from .model import Client
from .repository import ClientRepository

logger = logging.getLogger(__name__)

# Request key -> model field.
_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "nationalId": "national_id",
    "phone": "phone",
    "insuranceProduct": "insurance_product",
    "paymentMethod": "payment_method",
    "feePaid": "fee_paid",
    "location": "location",
}

_IMMUTABLE_FIELDS = frozenset({"id", "agentId", "createdAt", "updatedAt"})

_MAX_LENGTHS = {
    "firstName": NAME_MAX_LENGTH,
    "lastName": NAME_MAX_LENGTH,
    "nationalId": CODE_MAX_LENGTH,
    "phone": CODE_MAX_LENGTH,
    "insuranceProduct": LABEL_MAX_LENGTH,
    "paymentMethod": NAME_MAX_LENGTH,
    "location": LONG_TEXT_MAX_LENGTH,
}


def _clean(key: str, value: Any) -> object:
    if key in {"firstName", "lastName"}:
        return require_non_empty(value, key, _MAX_LENGTHS[key])
    if key == "feePaid":
        return optional_decimal(value, "Fee paid", FEE_MAX_DIGITS, FEE_DECIMAL_PLACES)
    return optional_str(value, key, _MAX_LENGTHS.get(key))


class ClientService:
    def __init__(self, clients: ClientRepository, policy: AuthorizationPolicy):
        self._clients = clients
        self._policy = policy

    def _get_or_404(self, client_id: int) -> Client:
        client = self._clients.get_by_id(int(client_id))
        if not client:
            raise NotFoundError("Client not found")
        return client

    def list_clients(self, actor: User) -> Sequence[Client]:
        owners = self._policy.visible_owner_ids(actor, Resource.CLIENTS)
        return list(self._clients.list_by_agents(owners))

    def create_client(self, actor: User, data: Mapping[str, Any]) -> Client:
        self._policy.require(actor, Resource.CLIENTS, Action.CREATE)
        values = {field: _clean(key, data.get(key)) for key, field in _FIELDS.items()}
        client_id = self._clients.create_client(agent_id=actor.user_id, created_at=now_local(), **values)
        return self._get_or_404(client_id)

    def update_client(self, actor: User, client_id: int, changes: Mapping[str, Any]) -> Client:
        client = self._get_or_404(client_id)
        self._policy.authorize_owner(
            actor, Resource.CLIENTS, Action.UPDATE, client.agent_id, message="You can only update your own clients"
        )

        patch: dict[str, object] = {}
        for key, value in changes.items():
            if key in _IMMUTABLE_FIELDS:
                logger.debug("Ignoring immutable field %s on client %s", key, client.client_id)
                continue
            field = _FIELDS.get(key)
            if field is not None:
                patch[field] = _clean(key, value)

        if not self._clients.update_client(client.client_id, patch, updated_at=now_local()):
            raise NotFoundError("Client not found")
        return self._get_or_404(client.client_id)

    def delete_client(self, actor: User, client_id: int) -> None:
        client = self._get_or_404(client_id)
        self._policy.authorize_owner(
            actor, Resource.CLIENTS, Action.DELETE, client.agent_id, message="You can only delete your own clients"
        )
        self._clients.delete_client(client.client_id)
