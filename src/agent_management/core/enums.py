from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Position of a user in the management tree."""

    ADMIN = "Admin"
    MANAGER = "Manager"
    SALES_STAFF = "SalesStaff"
    TEAM_LEADER = "TeamLeader"
    AGENT = "Agent"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    @property
    def is_field_role(self) -> bool:
        """TeamLeader and Agent sit on the same rung."""
        return self.rank == _ROLE_RANK[Role.AGENT]

    def can_supervise(self, other: "Role") -> bool:
        return other.rank == self.rank + 1

    @classmethod
    def field_roles(cls) -> frozenset["Role"]:
        return frozenset({cls.TEAM_LEADER, cls.AGENT})


_ROLE_RANK = {
    Role.ADMIN: 0,
    Role.MANAGER: 1,
    Role.SALES_STAFF: 2,
    Role.TEAM_LEADER: 3,
    Role.AGENT: 3,
}


class ActivityAction(str, Enum):
    """Machine-matchable tags stored on activity records."""

    LOGIN = "login"
    LOGOUT = "logout"
    CREATE_USER = "create_user"
    UPDATE_USER = "update_user"
    ACTIVATE_USER = "activate_user"
    DEACTIVATE_USER = "deactivate_user"
    CREATE_GROUP = "create_group"
    UPDATE_GROUP = "update_group"
    ADD_GROUP_MEMBER = "add_group_member"
    REMOVE_GROUP_MEMBER = "remove_group_member"
    RESOLVE_HELP_REQUEST = "resolve_help_request"
