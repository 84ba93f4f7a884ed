from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..activities.service import ActivityService
from ..authorization.policy import Action, AuthorizationPolicy, Resource, Scope
from ..common.validators import optional_bool, require_int, require_non_empty
from ..core.constants import LABEL_MAX_LENGTH
from ..core.enums import ActivityAction, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from .model import AgentGroup
from .repository import GroupRepository


class GroupService:
    """Use case: agent groups owned by SalesStaff and read by their leaders."""

    def __init__(
        self,
        groups: GroupRepository,
        users: UserRepository,
        policy: AuthorizationPolicy,
        activities: ActivityService,
    ):
        self._groups = groups
        self._users = users
        self._policy = policy
        self._activities = activities

    def _get_or_404(self, group_id: int) -> AgentGroup:
        group = self._groups.get_by_id(int(group_id))
        if not group:
            raise NotFoundError("Agent group not found")
        return group

    def _check_leader(self, actor: User, leader_id: Any) -> Optional[int]:
        if leader_id is None:
            return None
        leader_id = require_int(leader_id, "Leader")
        leader = self._users.get_by_id(leader_id)
        if not leader or leader.role != Role.TEAM_LEADER:
            raise ValidationError("Leader must be a team leader")
        if leader.manager_id != actor.user_id:
            raise ValidationError("Leader must be one of your team leaders")
        return leader.user_id

    def create_group(self, actor: User, *, name: Any, leader_id: Any = None) -> AgentGroup:
        self._policy.require(actor, Resource.AGENT_GROUPS, Action.CREATE)
        name = require_non_empty(name, "Group name", LABEL_MAX_LENGTH)
        leader_id = self._check_leader(actor, leader_id)

        group_id = self._groups.create_group(name=name, sales_staff_id=actor.user_id, leader_id=leader_id)
        group = self._get_or_404(group_id)
        self._activities.record(
            actor.user_id,
            ActivityAction.CREATE_GROUP,
            f'Sales staff created agent group: "{group.name}" (ID: {group.group_id})',
        )
        return group

    def list_groups(self, actor: User) -> Sequence[AgentGroup]:
        scope = self._policy.require(actor, Resource.AGENT_GROUPS, Action.READ)
        if scope == Scope.OWN:
            return list(self._groups.list_by_sales_staff(actor.user_id))
        if scope == Scope.LEADER:
            return list(self._groups.list_by_leader(actor.user_id))
        return []

    def update_group(self, actor: User, group_id: int, changes: Mapping[str, Any]) -> AgentGroup:
        group = self._get_or_404(group_id)
        self._policy.authorize_group(
            actor, Resource.AGENT_GROUPS, Action.UPDATE, group, message="You can only update your own groups"
        )

        patch: dict[str, object] = {}
        if "name" in changes:
            patch["name"] = require_non_empty(changes["name"], "Group name", LABEL_MAX_LENGTH)
        if "leaderId" in changes:
            patch["leader_id"] = self._check_leader(actor, changes["leaderId"])
        if "isActive" in changes:
            patch["is_active"] = optional_bool(changes["isActive"], "isActive")
            if patch["is_active"] is None:
                del patch["is_active"]

        if patch:
            self._groups.update_group(group.group_id, patch)
            self._activities.record(
                actor.user_id,
                ActivityAction.UPDATE_GROUP,
                f'Updated agent group: "{group.name}" (ID: {group.group_id})',
            )
        return self._get_or_404(group.group_id)

    def add_member(self, actor: User, group_id: int, agent_id: Any) -> Sequence[User]:
        group = self._get_or_404(group_id)
        self._policy.authorize_group(
            actor, Resource.GROUP_MEMBERS, Action.CREATE, group, message="You can only manage your own groups"
        )

        agent = self._users.get_by_id(require_int(agent_id, "Agent"))
        if not agent:
            raise NotFoundError("Agent not found")
        if agent.role != Role.AGENT:
            raise ValidationError("Only agents can be added to a group")
        if agent.manager_id != group.sales_staff_id:
            raise AuthorizationError("You can only add your own agents")

        self._groups.add_member(group_id=group.group_id, agent_id=agent.user_id)
        self._activities.record(
            actor.user_id,
            ActivityAction.ADD_GROUP_MEMBER,
            f'Added {agent.full_name} (ID: {agent.user_id}) to group "{group.name}"',
        )
        return self._policy.hierarchy.group_members_of(group.group_id)

    def list_members(self, actor: User, group_id: int) -> Sequence[User]:
        group = self._get_or_404(group_id)
        self._policy.authorize_group(actor, Resource.GROUP_MEMBERS, Action.READ, group)
        return self._policy.hierarchy.group_members_of(group.group_id)

    def remove_member(self, actor: User, group_id: int, agent_id: int) -> None:
        group = self._get_or_404(group_id)
        self._policy.authorize_group(
            actor, Resource.GROUP_MEMBERS, Action.DELETE, group, message="You can only manage your own groups"
        )
        if not self._groups.remove_member(group_id=group.group_id, agent_id=int(agent_id)):
            raise NotFoundError("Agent is not a member of this group")
        self._activities.record(
            actor.user_id,
            ActivityAction.REMOVE_GROUP_MEMBER,
            f'Removed agent (ID: {agent_id}) from group "{group.name}"',
        )

    def members_overview(self, actor: User) -> list[dict]:
        """Every visible group with its members."""

        return [
            {**group.to_dict(), "members": [m.to_contact() for m in self.list_members(actor, group.group_id)]}
            for group in self.list_groups(actor)
        ]
