from __future__ import annotations

from typing import Iterable, Mapping, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service layer depends on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_work_id(self, work_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_work_id_and_email(self, work_id: str, email: str) -> Optional[User]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def list_by_role(self, role: Optional[Role] = None) -> Sequence[User]:
        """All users, or only those holding ``role``."""

        raise NotImplementedError

    def list_by_manager(self, manager_id: int) -> Sequence[User]:
        raise NotImplementedError

    def list_by_ids(self, user_ids: Iterable[int]) -> Sequence[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        work_id: str,
        password_hash: str,
        role: Role,
        manager_id: Optional[int],
        national_id: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_user(self, user_id: int, changes: Mapping[str, object]) -> bool:
        """Merge ``changes`` (model field names) onto the stored row."""

        raise NotImplementedError

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError
