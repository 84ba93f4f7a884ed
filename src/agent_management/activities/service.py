from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..authorization.policy import Action, AuthorizationPolicy, Resource
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import CODE_MAX_LENGTH, DEFAULT_ACTIVITY_LIMIT, DEFAULT_ACTIVITY_PAGE, MAX_ACTIVITY_LIMIT
from ..core.enums import ActivityAction
from ..users.model import User
from .model import Activity
from .repository import ActivityRepository

logger = logging.getLogger(__name__)


class ActivityService:
    """Audit trail: ``record`` never fails the operation it describes."""

    def __init__(self, activities: ActivityRepository, policy: AuthorizationPolicy):
        self._activities = activities
        self._policy = policy

    def record(
        self,
        user_id: int,
        action: ActivityAction | str,
        details: str,
        *,
        now: Optional[datetime] = None,
    ) -> Optional[int]:
        tag = action.value if isinstance(action, ActivityAction) else str(action)
        try:
            return self._activities.create_activity(
                user_id=int(user_id),
                action=tag,
                details=details,
                timestamp=now or now_local(),
            )
        except Exception:
            logger.exception("Failed to record activity %r for user %s", tag, user_id)
            return None

    def log_manual(self, actor: User, *, action: str, details: str, now: Optional[datetime] = None) -> Activity:
        """Admin-posted entry; unlike ``record`` this is the primary operation, so errors propagate."""

        self._policy.require(actor, Resource.ACTIVITIES, Action.CREATE)
        action = require_non_empty(action, "Action", CODE_MAX_LENGTH)
        details = require_non_empty(details, "Details")
        timestamp = now or now_local()
        activity_id = self._activities.create_activity(
            user_id=actor.user_id, action=action, details=details, timestamp=timestamp
        )
        return Activity(activity_id=activity_id, user_id=actor.user_id, action=action, details=details, timestamp=timestamp)

    def list_page(self, actor: User, *, page: int = DEFAULT_ACTIVITY_PAGE, limit: int = DEFAULT_ACTIVITY_LIMIT) -> dict:
        self._policy.require(actor, Resource.ACTIVITIES, Action.READ)
        page = max(int(page or DEFAULT_ACTIVITY_PAGE), 1)
        limit = min(max(int(limit or DEFAULT_ACTIVITY_LIMIT), 1), MAX_ACTIVITY_LIMIT)
        items = self._activities.list_recent(offset=(page - 1) * limit, limit=limit)
        return {
            "activities": [a.to_dict() for a in items],
            "total": self._activities.count(),
            "page": page,
            "limit": limit,
        }
