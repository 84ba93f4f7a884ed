from __future__ import annotations

from typing import Mapping, Optional, Protocol, Sequence

from .model import AgentGroup


class GroupRepository(Protocol):
    def get_by_id(self, group_id: int) -> Optional[AgentGroup]:
        raise NotImplementedError

    def list_by_sales_staff(self, sales_staff_id: int) -> Sequence[AgentGroup]:
        raise NotImplementedError

    def list_by_leader(self, leader_id: int) -> Sequence[AgentGroup]:
        raise NotImplementedError

    def create_group(self, *, name: str, sales_staff_id: int, leader_id: Optional[int]) -> int:
        raise NotImplementedError

    def update_group(self, group_id: int, changes: Mapping[str, object]) -> bool:
        raise NotImplementedError

    def add_member(self, *, group_id: int, agent_id: int) -> None:
        """Raises ConflictError when the agent is already a member."""

        raise NotImplementedError

    def remove_member(self, *, group_id: int, agent_id: int) -> bool:
        raise NotImplementedError

    def list_member_ids(self, group_id: int) -> Sequence[int]:
        raise NotImplementedError
