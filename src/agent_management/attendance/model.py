from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one check-in per user per day."""

    attendance_id: int
    user_id: int
    work_date: date
    check_in_time: datetime
    sector: Optional[str] = None
    location: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "userId": self.user_id,
            "date": self.work_date.isoformat(),
            "sector": self.sector,
            "location": self.location,
            "checkInTime": self.check_in_time.isoformat(),
        }


@dataclass(frozen=True)
class AttendanceTimeFrame:
    """Check-in window a Manager publishes for their organisation."""

    frame_id: int
    manager_id: int
    start_time: Optional[time]
    end_time: Optional[time]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.frame_id,
            "managerId": self.manager_id,
            "startTime": self.start_time.strftime("%H:%M") if self.start_time else None,
            "endTime": self.end_time.strftime("%H:%M") if self.end_time else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
