from __future__ import annotations

from collections import deque
from typing import Iterable, Optional, Sequence

from ..core.constants import MAX_HIERARCHY_DEPTH
from ..core.enums import Role
from ..groups.repository import GroupRepository
from ..users.model import User
from ..users.repository import UserRepository


class HierarchyResolver:
    """Answers "who is above/below whom" from ``managerId`` edges and group memberships.

    Every walk tracks visited ids, so corrupt (cyclic) ``managerId`` data ends the walk
    instead of looping.
    """

    def __init__(self, users: UserRepository, groups: GroupRepository):
        self._users = users
        self._groups = groups

    def subordinates_of(self, user_id: int) -> Sequence[User]:
        return [u for u in self._users.list_by_manager(user_id) if u.user_id != user_id]

    def transitive_subordinates_of(self, user_id: int, roles: Optional[Iterable[Role]] = None) -> Sequence[User]:
        wanted = frozenset(roles) if roles is not None else None
        visited = {int(user_id)}
        found: list[User] = []
        queue = deque([int(user_id)])

        while queue:
            current = queue.popleft()
            for sub in self._users.list_by_manager(current):
                if sub.user_id in visited:
                    continue
                visited.add(sub.user_id)
                queue.append(sub.user_id)
                if wanted is None or sub.role in wanted:
                    found.append(sub)
        return found

    def subtree_ids(self, user_id: int, roles: Optional[Iterable[Role]] = None) -> set[int]:
        return {u.user_id for u in self.transitive_subordinates_of(user_id, roles)}

    def superior_of(self, user_id: int) -> Optional[User]:
        user = self._users.get_by_id(user_id)
        if not user or user.manager_id is None or user.manager_id == user.user_id:
            return None
        return self._users.get_by_id(user.manager_id)

    def chain_of(self, user_id: int) -> Sequence[User]:
        """Superiors from the direct manager upward, stopping on a repeat or a dangling id."""

        chain: list[User] = []
        visited = {int(user_id)}
        current = self.superior_of(user_id)
        while current is not None and current.user_id not in visited:
            chain.append(current)
            visited.add(current.user_id)
            if len(chain) >= MAX_HIERARCHY_DEPTH:
                break
            current = self.superior_of(current.user_id)
        return chain

    def group_members_of(self, group_id: int) -> Sequence[User]:
        member_ids = self._groups.list_member_ids(group_id)
        return [u for u in self._users.list_by_ids(member_ids) if u.role == Role.AGENT]

    def team_of(self, leader_id: int) -> Sequence[User]:
        """Members of every group the TeamLeader leads, without duplicates."""

        seen: set[int] = set()
        team: list[User] = []
        for group in self._groups.list_by_leader(leader_id):
            for member in self.group_members_of(group.group_id):
                if member.user_id not in seen:
                    seen.add(member.user_id)
                    team.append(member)
        return team

    def team_ids(self, leader_id: int) -> set[int]:
        return {u.user_id for u in self.team_of(leader_id)}

    def users_with_role(self, role: Role) -> Sequence[User]:
        return self._users.list_by_role(role)
