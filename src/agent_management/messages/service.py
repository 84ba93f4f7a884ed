from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, Optional, Sequence

from ..authorization.policy import AuthorizationPolicy
from ..common.datetime_utils import now_local
from ..common.validators import require_int, require_non_empty
from ..core.exceptions import AuthorizationError, NotFoundError
from ..users.model import User
from ..users.repository import UserRepository
from .model import Message
from .repository import MessageRepository

logger = logging.getLogger(__name__)


class MessageService:
    """Poll-based internal messaging gated by the sender/receiver compatibility rules."""

    def __init__(self, messages: MessageRepository, users: UserRepository, policy: AuthorizationPolicy):
        self._messages = messages
        self._users = users
        self._policy = policy

    def _contacts(self, user_ids: Iterable[int]) -> dict[int, dict]:
        return {u.user_id: u.to_contact() for u in self._users.list_by_ids(set(user_ids))}

    def _augment(self, messages: Sequence[Message]) -> list[dict]:
        contacts = self._contacts({m.sender_id for m in messages} | {m.receiver_id for m in messages})
        return [
            {**m.to_dict(), "sender": contacts.get(m.sender_id), "receiver": contacts.get(m.receiver_id)}
            for m in messages
        ]

    def send(self, actor: User, *, receiver_id: Any, content: Any, now: Optional[datetime] = None) -> Message:
        content = require_non_empty(content, "Content")
        receiver = self._users.get_by_id(require_int(receiver_id, "Receiver"))
        if not receiver:
            raise NotFoundError("Receiver not found")

        if not self._policy.can_message(actor, receiver):
            logger.warning(
                "Message from %s (%s) to %s (%s) denied",
                actor.user_id,
                actor.role.value,
                receiver.user_id,
                receiver.role.value,
            )
            raise AuthorizationError("You are not allowed to message this user")

        message_id = self._messages.create_message(
            sender_id=actor.user_id, receiver_id=receiver.user_id, content=content, sent_at=now or now_local()
        )
        message = self._messages.get_by_id(message_id)
        if message is None:
            raise NotFoundError("Message not found")
        return message

    def list_messages(self, actor: User) -> list[dict]:
        return self._augment(self._messages.list_for_user(actor.user_id))

    def conversations(self, actor: User) -> list[dict]:
        """One entry per counterpart: contact card, last message and unread count, newest first."""

        latest: dict[int, Message] = {}
        unread: dict[int, int] = {}
        for m in self._messages.list_for_user(actor.user_id):
            other = m.other_party(actor.user_id)
            latest[other] = m
            if m.receiver_id == actor.user_id and not m.is_read:
                unread[other] = unread.get(other, 0) + 1

        contacts = self._contacts(latest.keys())
        ordered = sorted(latest.items(), key=lambda kv: (kv[1].sent_at, kv[1].message_id), reverse=True)
        return [
            {"user": contacts.get(other), "lastMessage": m.to_dict(), "unreadCount": unread.get(other, 0)}
            for other, m in ordered
        ]

    def thread(self, actor: User, other_id: int) -> list[dict]:
        other = self._users.get_by_id(int(other_id))
        if not other:
            raise NotFoundError("User not found")
        return self._augment(self._messages.list_between(actor.user_id, other.user_id))

    def mark_read(self, actor: User, message_id: int) -> Message:
        message = self._messages.get_by_id(int(message_id))
        if not message:
            raise NotFoundError("Message not found")
        if message.receiver_id != actor.user_id:
            raise AuthorizationError("You can only mark messages sent to you as read")
        self._messages.mark_read(message.message_id)
        updated = self._messages.get_by_id(message.message_id)
        if updated is None:
            raise NotFoundError("Message not found")
        return updated

    def available_receivers(self, actor: User) -> Sequence[User]:
        return self._policy.available_receivers(actor)
