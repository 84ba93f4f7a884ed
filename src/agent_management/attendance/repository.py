from __future__ import annotations

from datetime import date, datetime, time
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from .model import AttendanceRecord, AttendanceTimeFrame


class AttendanceRepository(Protocol):
    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_by_date(self, work_date: date, *, user_ids: Optional[Iterable[int]] = None) -> Sequence[AttendanceRecord]:
        """Records for ``work_date``; ``user_ids=None`` means every user."""

        raise NotImplementedError

    def create_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: datetime,
        sector: Optional[str] = None,
        location: Optional[str] = None,
    ) -> int:
        """Insert guarded by the (user_id, work_date) unique index; a duplicate raises ConflictError."""

        raise NotImplementedError


class TimeFrameRepository(Protocol):
    def get_by_id(self, frame_id: int) -> Optional[AttendanceTimeFrame]:
        raise NotImplementedError

    def list_by_manager(self, manager_id: int) -> Sequence[AttendanceTimeFrame]:
        raise NotImplementedError

    def create_time_frame(
        self, *, manager_id: int, start_time: Optional[time], end_time: Optional[time], created_at: datetime
    ) -> int:
        raise NotImplementedError

    def update_time_frame(self, frame_id: int, changes: Mapping[str, object], *, updated_at: datetime) -> bool:
        raise NotImplementedError
