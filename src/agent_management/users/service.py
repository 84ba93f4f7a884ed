from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..activities.service import ActivityService
from ..authorization.policy import USER_RESOURCE_BY_ROLE, Action, AuthorizationPolicy, Resource, Scope
from ..common.validators import optional_str, require_email, require_min_length, require_non_empty
from ..core.constants import CODE_MAX_LENGTH, MIN_PASSWORD_LENGTH, NAME_MAX_LENGTH
from ..core.enums import ActivityAction, Role
from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)

ROLE_LABELS = {
    Role.ADMIN: "admin",
    Role.MANAGER: "manager",
    Role.SALES_STAFF: "sales staff",
    Role.TEAM_LEADER: "team leader",
    Role.AGENT: "agent",
}

# Request key -> model field for profile updates.
_PROFILE_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "workId": "work_id",
    "nationalId": "national_id",
    "phoneNumber": "phone_number",
    "password": "password_hash",
}

# Identity, ownership and lifecycle fields are never taken from a patch body.
_IMMUTABLE_FIELDS = frozenset({"id", "role", "managerId", "createdAt", "isActive"})


class AuthService:
    """Use case: login / logout / session resolution."""

    def __init__(self, users: UserRepository, activities: ActivityService):
        self._users = users
        self._activities = activities

    def authenticate(self, work_id: Any, email: Any, password: Any) -> User:
        if not isinstance(work_id, str) or not work_id.strip() or not isinstance(email, str) or not email.strip():
            raise AuthenticationError("Both Work ID and Email are required")

        user = self._users.get_by_work_id_and_email(work_id.strip(), email.strip().lower())
        if not user:
            raise AuthenticationError("Invalid credentials")

        if not user.is_active:
            raise AuthenticationError("Account inactive. Please contact administrator.")

        try:
            ok = isinstance(password, str) and check_password_hash(user.password_hash, password)
        except ValueError:
            # placeholder or corrupted hash
            ok = False

        if not ok:
            raise AuthenticationError("Invalid credentials")

        self._activities.record(
            user.user_id,
            ActivityAction.LOGIN,
            f"{user.full_name} ({user.role.value}) logged in",
        )
        return user

    def logout(self, user: User) -> None:
        self._activities.record(
            user.user_id,
            ActivityAction.LOGOUT,
            f"{user.full_name} ({user.role.value}) logged out",
        )

    def resolve_session_user(self, user_id: Optional[int]) -> User:
        if user_id is None:
            raise AuthenticationError("Unauthorized")
        user = self._users.get_by_id(int(user_id))
        if not user or not user.is_active:
            raise AuthenticationError("Unauthorized")
        return user


class UserService:
    """Use case: manage users one rung below the actor."""

    def __init__(self, users: UserRepository, policy: AuthorizationPolicy, activities: ActivityService):
        self._users = users
        self._policy = policy
        self._activities = activities

    @staticmethod
    def _resource_for(role: Role) -> Resource:
        resource = USER_RESOURCE_BY_ROLE.get(role)
        if resource is None:
            raise ValidationError("Admin accounts cannot be managed here")
        return resource

    def _get_or_404(self, user_id: int, label: str = "User") -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError(f"{label[:1].upper()}{label[1:]} not found")
        return user

    def _ensure_unique(self, *, email: Optional[str] = None, work_id: Optional[str] = None, exclude_id: Optional[int] = None) -> None:
        # Fast path for a clear message; the unique indexes still catch races.
        if email is not None:
            other = self._users.get_by_email(email)
            if other and other.user_id != exclude_id:
                raise ConflictError("Email already in use")
        if work_id is not None:
            other = self._users.get_by_work_id(work_id)
            if other and other.user_id != exclude_id:
                raise ConflictError("Work ID already in use")

    def create_subordinate(
        self,
        actor: User,
        *,
        role: Role,
        first_name: Any,
        last_name: Any,
        email: Any,
        work_id: Any,
        password: Any,
        national_id: Any = None,
        phone_number: Any = None,
    ) -> User:
        if role == Role.ADMIN or not actor.role.can_supervise(role):
            raise ValidationError(f"{actor.role.value} cannot create a {role.value}")

        self._policy.require(actor, self._resource_for(role), Action.CREATE)

        first_name = require_non_empty(first_name, "First name", NAME_MAX_LENGTH)
        last_name = require_non_empty(last_name, "Last name", NAME_MAX_LENGTH)
        email = require_email(email)
        work_id = require_non_empty(work_id, "Work ID", CODE_MAX_LENGTH)
        password = require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        national_id = optional_str(national_id, "National ID", CODE_MAX_LENGTH)
        phone_number = optional_str(phone_number, "Phone number", CODE_MAX_LENGTH)

        self._ensure_unique(email=email, work_id=work_id)

        # Managers are not attached to an Admin; every other role reports to its creator.
        manager_id = None if actor.role == Role.ADMIN else actor.user_id

        user_id = self._users.create_user(
            first_name=first_name,
            last_name=last_name,
            email=email,
            work_id=work_id,
            password_hash=generate_password_hash(password),
            role=role,
            manager_id=manager_id,
            national_id=national_id,
            phone_number=phone_number,
        )
        created = self._get_or_404(user_id)

        self._activities.record(
            actor.user_id,
            ActivityAction.CREATE_USER,
            f"{actor.role.value} created {ROLE_LABELS[role]}: {created.full_name} (ID: {created.user_id})",
        )
        return created

    def list_users(self, actor: User, *, role: Optional[Role] = None) -> Sequence[User]:
        """Directory view (Admin)."""

        self._policy.require(actor, Resource.USERS, Action.READ)
        return list(self._users.list_by_role(role))

    def list_in_scope(self, actor: User, roles: Iterable[Role]) -> Sequence[User]:
        """Users holding one of ``roles`` that the actor may read, per the policy scope."""

        wanted = frozenset(roles)
        resources = {self._resource_for(r) for r in wanted}
        if len(resources) != 1:
            raise ValueError("Roles must share one policy resource")
        scope = self._policy.require(actor, resources.pop(), Action.READ)

        if scope == Scope.ALL:
            found: list[User] = []
            for r in sorted(wanted, key=lambda x: x.value):
                found.extend(self._users.list_by_role(r))
            return sorted(found, key=lambda u: u.user_id)
        if scope == Scope.OWN:
            return [u for u in self._policy.hierarchy.subordinates_of(actor.user_id) if u.role in wanted]
        if scope == Scope.SUBTREE:
            return list(self._policy.hierarchy.transitive_subordinates_of(actor.user_id, wanted))
        return []

    def _check_family(self, target: User, role_family: Role) -> Resource:
        resource = self._resource_for(role_family)
        if self._resource_for(target.role) != resource:
            raise ValidationError(f"User is not a {ROLE_LABELS[role_family]}")
        return resource

    def update_subordinate(self, actor: User, user_id: int, *, role_family: Role, changes: Mapping[str, Any]) -> User:
        label = ROLE_LABELS[role_family]
        target = self._get_or_404(user_id, label)
        resource = self._check_family(target, role_family)
        self._policy.authorize_owner(
            actor, resource, Action.UPDATE, target.manager_id, message=f"You can only update your own {label}"
        )

        patch: dict[str, object] = {}
        for key, value in (changes or {}).items():
            if key in _IMMUTABLE_FIELDS:
                logger.debug("Ignoring immutable field %s on user %s", key, target.user_id)
                continue
            field = _PROFILE_FIELDS.get(key)
            if field is None:
                continue
            if field == "email":
                patch[field] = require_email(value)
            elif field == "password_hash":
                patch[field] = generate_password_hash(require_min_length(value, "Password", MIN_PASSWORD_LENGTH))
            elif field in {"first_name", "last_name"}:
                patch[field] = require_non_empty(value, key, NAME_MAX_LENGTH)
            elif field == "work_id":
                patch[field] = require_non_empty(value, key, CODE_MAX_LENGTH)
            else:
                patch[field] = optional_str(value, key, CODE_MAX_LENGTH)

        self._ensure_unique(
            email=patch.get("email"),  # type: ignore[arg-type]
            work_id=patch.get("work_id"),  # type: ignore[arg-type]
            exclude_id=target.user_id,
        )

        if patch and not self._users.update_user(target.user_id, patch):
            raise NotFoundError(f"{label[:1].upper()}{label[1:]} not found")

        updated = self._get_or_404(target.user_id, label)
        if patch:
            self._activities.record(
                actor.user_id,
                ActivityAction.UPDATE_USER,
                f"Updated {label}: {updated.full_name} (ID: {updated.user_id})",
            )
        return updated

    def deactivate_subordinate(self, actor: User, user_id: int, *, role_family: Role) -> None:
        """Soft delete: owned records stay in place."""

        label = ROLE_LABELS[role_family]
        target = self._get_or_404(user_id, label)
        resource = self._check_family(target, role_family)
        self._policy.authorize_owner(
            actor, resource, Action.DELETE, target.manager_id, message=f"You can only deactivate your own {label}"
        )
        self._users.set_active(target.user_id, is_active=False)
        self._activities.record(
            actor.user_id,
            ActivityAction.DEACTIVATE_USER,
            f"Deactivated user: {target.full_name} ({target.role.value})",
        )

    def set_active(self, actor: User, user_id: int, *, is_active: bool) -> User:
        self._policy.require(actor, Resource.USERS, Action.UPDATE)
        target = self._get_or_404(user_id)
        if target.role == Role.ADMIN and not is_active:
            raise ValidationError("Admin accounts cannot be deactivated")

        self._users.set_active(target.user_id, is_active=is_active)
        updated = self._get_or_404(target.user_id)

        action = ActivityAction.ACTIVATE_USER if is_active else ActivityAction.DEACTIVATE_USER
        verb = "Activated" if is_active else "Deactivated"
        self._activities.record(actor.user_id, action, f"{verb} user: {updated.full_name} ({updated.role.value})")
        return updated
