from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence

from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..groups.model import AgentGroup
from ..hierarchy.resolver import HierarchyResolver
from ..users.model import User

logger = logging.getLogger(__name__)


class Resource(str, Enum):
    MANAGERS = "managers"
    SALES_STAFF = "sales_staff"
    AGENTS = "agents"
    USERS = "users"
    CLIENTS = "clients"
    AGENT_GROUPS = "agent_groups"
    GROUP_MEMBERS = "group_members"
    ATTENDANCE = "attendance"
    TIME_FRAMES = "time_frames"
    DAILY_REPORTS = "daily_reports"
    HELP_REQUESTS = "help_requests"
    ACTIVITIES = "activities"


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class Scope(str, Enum):
    """How far a grant reaches from the actor."""

    ALL = "all"
    OWN = "own"  # owning FK == actor
    SUBTREE = "subtree"  # owning FK within the actor's transitive subordinates
    LEADER = "leader"  # group led by the actor
    TEAM = "team"  # actor or a member of a group the actor leads


class Relation(str, Enum):
    ANY = "any"
    RECEIVER_REPORTS_TO_SENDER = "receiver_reports_to_sender"
    SENDER_REPORTS_TO_RECEIVER = "sender_reports_to_receiver"


CRUD = (Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE)


def _grant(scope: Scope, *actions: Action) -> Dict[Action, Scope]:
    return {action: scope for action in actions}


POLICY: Dict[Resource, Dict[Role, Dict[Action, Scope]]] = {
    Resource.MANAGERS: {
        Role.ADMIN: _grant(Scope.ALL, *CRUD),
    },
    Resource.SALES_STAFF: {
        Role.ADMIN: _grant(Scope.ALL, Action.READ),
        Role.MANAGER: _grant(Scope.OWN, *CRUD),
    },
    Resource.AGENTS: {
        Role.ADMIN: _grant(Scope.ALL, Action.READ),
        Role.MANAGER: _grant(Scope.SUBTREE, Action.READ),
        Role.SALES_STAFF: _grant(Scope.OWN, *CRUD),
    },
    Resource.USERS: {
        Role.ADMIN: _grant(Scope.ALL, Action.READ, Action.UPDATE),
    },
    Resource.CLIENTS: {
        Role.SALES_STAFF: _grant(Scope.SUBTREE, Action.READ),
        Role.TEAM_LEADER: _grant(Scope.OWN, *CRUD),
        Role.AGENT: _grant(Scope.OWN, *CRUD),
    },
    Resource.AGENT_GROUPS: {
        Role.SALES_STAFF: _grant(Scope.OWN, *CRUD),
        Role.TEAM_LEADER: _grant(Scope.LEADER, Action.READ),
    },
    Resource.GROUP_MEMBERS: {
        Role.SALES_STAFF: _grant(Scope.OWN, Action.CREATE, Action.READ, Action.DELETE),
        Role.TEAM_LEADER: _grant(Scope.LEADER, Action.READ),
    },
    Resource.ATTENDANCE: {
        Role.MANAGER: _grant(Scope.ALL, Action.READ),
        Role.SALES_STAFF: _grant(Scope.SUBTREE, Action.READ),
        Role.TEAM_LEADER: {Action.CREATE: Scope.OWN, Action.READ: Scope.TEAM},
        Role.AGENT: _grant(Scope.OWN, Action.CREATE, Action.READ),
    },
    Resource.TIME_FRAMES: {
        Role.MANAGER: _grant(Scope.OWN, Action.CREATE, Action.READ, Action.UPDATE),
    },
    Resource.DAILY_REPORTS: {
        Role.TEAM_LEADER: {Action.CREATE: Scope.OWN, Action.READ: Scope.TEAM},
        Role.AGENT: _grant(Scope.OWN, Action.CREATE, Action.READ),
    },
    Resource.HELP_REQUESTS: {
        Role.ADMIN: _grant(Scope.ALL, Action.READ, Action.UPDATE),
    },
    Resource.ACTIVITIES: {
        Role.ADMIN: _grant(Scope.ALL, Action.CREATE, Action.READ),
    },
}

USER_RESOURCE_BY_ROLE = {
    Role.MANAGER: Resource.MANAGERS,
    Role.SALES_STAFF: Resource.SALES_STAFF,
    Role.TEAM_LEADER: Resource.AGENTS,
    Role.AGENT: Resource.AGENTS,
}


@dataclass(frozen=True)
class MessagingRule:
    sender: Role
    receivers: frozenset
    relation: Relation


def messaging_rules(*, strict_manager_messaging: bool = False) -> Sequence[MessagingRule]:
    """Directed sender/receiver compatibility, evaluated in order; first match wins."""

    sales_to_manager = (
        Relation.SENDER_REPORTS_TO_RECEIVER if strict_manager_messaging else Relation.ANY
    )
    return (
        MessagingRule(Role.ADMIN, frozenset({Role.MANAGER}), Relation.ANY),
        MessagingRule(Role.MANAGER, frozenset({Role.SALES_STAFF, Role.ADMIN}), Relation.ANY),
        MessagingRule(Role.SALES_STAFF, Role.field_roles(), Relation.RECEIVER_REPORTS_TO_SENDER),
        MessagingRule(Role.SALES_STAFF, frozenset({Role.MANAGER}), sales_to_manager),
        MessagingRule(Role.TEAM_LEADER, frozenset({Role.SALES_STAFF}), Relation.SENDER_REPORTS_TO_RECEIVER),
        MessagingRule(Role.AGENT, frozenset({Role.SALES_STAFF}), Relation.SENDER_REPORTS_TO_RECEIVER),
    )


class AuthorizationPolicy:
    """Single decision point for role-and-relationship access control."""

    def __init__(self, hierarchy: HierarchyResolver, *, strict_manager_messaging: bool = False):
        self._hierarchy = hierarchy
        self._rules = messaging_rules(strict_manager_messaging=strict_manager_messaging)

    @property
    def hierarchy(self) -> HierarchyResolver:
        return self._hierarchy

    @staticmethod
    def scope_for(actor: User, resource: Resource, action: Action) -> Optional[Scope]:
        return POLICY.get(resource, {}).get(actor.role, {}).get(action)

    def require(self, actor: User, resource: Resource, action: Action) -> Scope:
        scope = self.scope_for(actor, resource, action)
        if scope is None:
            logger.warning(
                "Denied %s on %s for user %s (%s)", action.value, resource.value, actor.user_id, actor.role.value
            )
            raise AuthorizationError("Forbidden: Insufficient permissions")
        return scope

    def owner_in_scope(self, actor: User, scope: Scope, owner_id: Optional[int]) -> bool:
        if scope == Scope.ALL:
            return True
        if owner_id is None:
            return False
        if scope == Scope.OWN:
            return owner_id == actor.user_id
        if scope == Scope.SUBTREE:
            return owner_id in self._hierarchy.subtree_ids(actor.user_id)
        if scope == Scope.TEAM:
            return owner_id == actor.user_id or owner_id in self._hierarchy.team_ids(actor.user_id)
        return False

    def authorize_owner(
        self,
        actor: User,
        resource: Resource,
        action: Action,
        owner_id: Optional[int],
        *,
        message: str = "You do not have access to this record",
    ) -> None:
        """Write-scope check against the owning FK of a freshly fetched entity."""

        scope = self.require(actor, resource, action)
        if not self.owner_in_scope(actor, scope, owner_id):
            logger.warning(
                "Denied %s on %s owned by %s for user %s", action.value, resource.value, owner_id, actor.user_id
            )
            raise AuthorizationError(message)

    def authorize_group(
        self,
        actor: User,
        resource: Resource,
        action: Action,
        group: AgentGroup,
        *,
        message: str = "You do not have access to this group",
    ) -> None:
        scope = self.require(actor, resource, action)
        if scope == Scope.ALL:
            return
        if scope == Scope.OWN and group.sales_staff_id == actor.user_id:
            return
        if scope == Scope.LEADER and group.leader_id == actor.user_id:
            return
        logger.warning("Denied %s on group %s for user %s", action.value, group.group_id, actor.user_id)
        raise AuthorizationError(message)

    def visible_owner_ids(self, actor: User, resource: Resource, action: Action = Action.READ) -> Optional[set[int]]:
        """Owner ids the actor may list; None means unrestricted."""

        scope = self.require(actor, resource, action)
        if scope == Scope.ALL:
            return None
        if scope == Scope.OWN:
            return {actor.user_id}
        if scope == Scope.SUBTREE:
            return self._hierarchy.subtree_ids(actor.user_id)
        if scope == Scope.TEAM:
            return {actor.user_id} | self._hierarchy.team_ids(actor.user_id)
        return set()

    def _relation_holds(self, relation: Relation, sender: User, receiver: User) -> bool:
        if relation == Relation.ANY:
            return True
        if relation == Relation.RECEIVER_REPORTS_TO_SENDER:
            return receiver.manager_id == sender.user_id
        if relation == Relation.SENDER_REPORTS_TO_RECEIVER:
            return sender.manager_id is not None and receiver.user_id == sender.manager_id
        return False

    def can_message(self, sender: User, receiver: User) -> bool:
        for rule in self._rules:
            if rule.sender == sender.role and receiver.role in rule.receivers:
                return self._relation_holds(rule.relation, sender, receiver)
        return False

    def available_receivers(self, actor: User) -> Sequence[User]:
        """Recipient picker contents; mirrors ``can_message`` role by role."""

        users = self._hierarchy
        if actor.role == Role.ADMIN:
            return list(users.users_with_role(Role.MANAGER))

        if actor.role == Role.MANAGER:
            own_staff = [u for u in users.subordinates_of(actor.user_id) if u.role == Role.SALES_STAFF]
            return own_staff + list(users.users_with_role(Role.ADMIN))

        if actor.role == Role.SALES_STAFF:
            receivers = [u for u in users.subordinates_of(actor.user_id) if u.role.is_field_role]
            manager = users.superior_of(actor.user_id)
            if manager is not None and manager.role == Role.MANAGER:
                receivers.append(manager)
            return receivers

        superior = users.superior_of(actor.user_id)
        if superior is not None and superior.role == Role.SALES_STAFF:
            return [superior]
        return []
