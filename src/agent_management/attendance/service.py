from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Mapping, Optional, Sequence

from ..authorization.policy import Action, AuthorizationPolicy, Resource
from ..common.datetime_utils import now_local, parse_clock_time
from ..common.validators import optional_str
from ..core.constants import LABEL_MAX_LENGTH, LONG_TEXT_MAX_LENGTH
from ..core.exceptions import NotFoundError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from .model import AttendanceRecord, AttendanceTimeFrame
from .repository import AttendanceRepository, TimeFrameRepository

logger = logging.getLogger(__name__)


def _clock(value: Optional[time]) -> Optional[str]:
    return value.isoformat() if value else None


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        time_frames: TimeFrameRepository,
        users: UserRepository,
        policy: AuthorizationPolicy,
    ):
        self._attendance = attendance
        self._time_frames = time_frames
        self._users = users
        self._policy = policy

    def check_in(
        self,
        actor: User,
        *,
        sector: Any = None,
        location: Any = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Record today's check-in for the actor.

        A second check-in for the same day raises ConflictError from the unique (user, date) index.
        """

        self._policy.require(actor, Resource.ATTENDANCE, Action.CREATE)
        now = now or now_local()
        attendance_id = self._attendance.create_checkin(
            user_id=actor.user_id,
            work_date=now.date(),
            check_in_time=now,
            sector=optional_str(sector, "Sector", LABEL_MAX_LENGTH),
            location=optional_str(location, "Location", LONG_TEXT_MAX_LENGTH),
        )
        logger.info("User %s checked in (attendance %s)", actor.user_id, attendance_id)
        record = self._attendance.get_for_user_and_date(actor.user_id, now.date())
        if record is None:
            raise NotFoundError("Attendance record not found")
        return record

    def own_record(self, actor: User, work_date: date) -> Optional[AttendanceRecord]:
        self._policy.require(actor, Resource.ATTENDANCE, Action.READ)
        return self._attendance.get_for_user_and_date(actor.user_id, work_date)

    def list_for_date(self, actor: User, work_date: date) -> list[dict]:
        """Records the actor may see for ``work_date``, each with the user's contact card."""

        owners = self._policy.visible_owner_ids(actor, Resource.ATTENDANCE)
        records = self._attendance.list_by_date(work_date, user_ids=owners)
        people = {u.user_id: u for u in self._users.list_by_ids({r.user_id for r in records})}
        return [
            {**r.to_dict(), "user": people[r.user_id].to_contact() if r.user_id in people else None}
            for r in records
        ]

    # --- time frames ---

    @staticmethod
    def _parse_window(start: Any, end: Any) -> tuple:
        start_time = parse_clock_time(start, "Start time") if start not in (None, "") else None
        end_time = parse_clock_time(end, "End time") if end not in (None, "") else None
        if start_time and end_time and end_time <= start_time:
            raise ValidationError("End time must be after start time")
        return start_time, end_time

    def list_time_frames(self, actor: User) -> Sequence[AttendanceTimeFrame]:
        self._policy.require(actor, Resource.TIME_FRAMES, Action.READ)
        return list(self._time_frames.list_by_manager(actor.user_id))

    def create_time_frame(self, actor: User, data: Mapping[str, Any]) -> AttendanceTimeFrame:
        self._policy.require(actor, Resource.TIME_FRAMES, Action.CREATE)
        start_time, end_time = self._parse_window(data.get("startTime"), data.get("endTime"))
        frame_id = self._time_frames.create_time_frame(
            manager_id=actor.user_id, start_time=start_time, end_time=end_time, created_at=now_local()
        )
        frame = self._time_frames.get_by_id(frame_id)
        if frame is None:
            raise NotFoundError("Time frame not found")
        return frame

    def update_time_frame(self, actor: User, frame_id: int, changes: Mapping[str, Any]) -> AttendanceTimeFrame:
        frame = self._time_frames.get_by_id(int(frame_id))
        if not frame:
            raise NotFoundError("Time frame not found")
        self._policy.authorize_owner(
            actor,
            Resource.TIME_FRAMES,
            Action.UPDATE,
            frame.manager_id,
            message="You can only update your own time frames",
        )

        start = changes.get("startTime", _clock(frame.start_time))
        end = changes.get("endTime", _clock(frame.end_time))
        start_time, end_time = self._parse_window(start, end)

        self._time_frames.update_time_frame(
            frame.frame_id, {"start_time": start_time, "end_time": end_time}, updated_at=now_local()
        )
        updated = self._time_frames.get_by_id(frame.frame_id)
        if updated is None:
            raise NotFoundError("Time frame not found")
        return updated
