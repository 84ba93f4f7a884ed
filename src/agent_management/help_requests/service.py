from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..activities.service import ActivityService
from ..authorization.policy import Action, AuthorizationPolicy, Resource
from ..common.datetime_utils import now_local
from ..common.validators import require_email, require_non_empty
from ..core.constants import LABEL_MAX_LENGTH
from ..core.enums import ActivityAction
from ..core.exceptions import NotFoundError, ValidationError
from ..users.model import User
from .model import HelpRequest
from .repository import HelpRequestRepository

logger = logging.getLogger(__name__)


def parse_resolved_filter(value: Optional[str]) -> Optional[bool]:
    """``?resolved=`` query value: absent means no filter."""

    if value is None or value == "":
        return None
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValidationError("resolved must be true or false")


class HelpRequestService:
    def __init__(self, help_requests: HelpRequestRepository, policy: AuthorizationPolicy, activities: ActivityService):
        self._help_requests = help_requests
        self._policy = policy
        self._activities = activities

    def submit(self, *, name: Any, email: Any, message: Any) -> HelpRequest:
        """Public: no session required."""

        request_id = self._help_requests.create_request(
            name=require_non_empty(name, "Name", LABEL_MAX_LENGTH),
            email=require_email(email),
            message=require_non_empty(message, "Message"),
            created_at=now_local(),
        )
        logger.info("Help request %s submitted", request_id)
        created = self._help_requests.get_by_id(request_id)
        if created is None:
            raise NotFoundError("Help request not found")
        return created

    def list_requests(self, actor: User, *, resolved: Optional[bool] = None) -> Sequence[HelpRequest]:
        self._policy.require(actor, Resource.HELP_REQUESTS, Action.READ)
        return list(self._help_requests.list_requests(resolved=resolved))

    def resolve(self, actor: User, request_id: int) -> HelpRequest:
        self._policy.require(actor, Resource.HELP_REQUESTS, Action.UPDATE)
        if not self._help_requests.mark_resolved(int(request_id)):
            raise NotFoundError("Help request not found")
        resolved = self._help_requests.get_by_id(int(request_id))
        if resolved is None:
            raise NotFoundError("Help request not found")
        self._activities.record(
            actor.user_id,
            ActivityAction.RESOLVE_HELP_REQUEST,
            f"Resolved help request from {resolved.name} (ID: {resolved.request_id})",
        )
        return resolved
