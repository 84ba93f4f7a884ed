from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from typing import Optional

from werkzeug.security import generate_password_hash

from agent_management.activities.model import Activity
from agent_management.attendance.model import AttendanceRecord, AttendanceTimeFrame
from agent_management.clients.model import Client
from agent_management.container import Repositories
from agent_management.core.enums import Role
from agent_management.core.exceptions import ConflictError
from agent_management.groups.model import AgentGroup
from agent_management.help_requests.model import HelpRequest
from agent_management.messages.model import Message
from agent_management.reports.model import DailyReport
from agent_management.users.model import User

CREATED_AT = datetime(2026, 1, 5, 9, 0, 0)


class _Ids:
    def __init__(self):
        self._next = 1

    def take(self) -> int:
        value = self._next
        self._next += 1
        return value


class FakeUserRepository:
    def __init__(self):
        self._ids = _Ids()
        self.rows: dict[int, User] = {}

    def _check_unique(self, *, email: str, work_id: str, exclude_id: Optional[int] = None) -> None:
        for u in self.rows.values():
            if u.user_id == exclude_id:
                continue
            if u.email == email:
                raise ConflictError("Email already in use")
            if u.work_id == work_id:
                raise ConflictError("Work ID already in use")

    def get_by_id(self, user_id):
        return self.rows.get(int(user_id))

    def get_by_email(self, email):
        return next((u for u in self.rows.values() if u.email == email), None)

    def get_by_work_id(self, work_id):
        return next((u for u in self.rows.values() if u.work_id == work_id), None)

    def get_by_work_id_and_email(self, work_id, email):
        return next((u for u in self.rows.values() if u.work_id == work_id and u.email == email), None)

    def count(self):
        return len(self.rows)

    def list_by_role(self, role=None):
        return [u for _, u in sorted(self.rows.items()) if role is None or u.role == role]

    def list_by_manager(self, manager_id):
        return [u for _, u in sorted(self.rows.items()) if u.manager_id == int(manager_id)]

    def list_by_ids(self, user_ids):
        wanted = {int(i) for i in user_ids}
        return [u for _, u in sorted(self.rows.items()) if u.user_id in wanted]

    def create_user(
        self,
        *,
        first_name,
        last_name,
        email,
        work_id,
        password_hash,
        role,
        manager_id,
        national_id=None,
        phone_number=None,
    ):
        self._check_unique(email=email, work_id=work_id)
        user_id = self._ids.take()
        self.rows[user_id] = User(
            user_id=user_id,
            first_name=first_name,
            last_name=last_name,
            email=email,
            work_id=work_id,
            password_hash=password_hash,
            role=Role(role),
            manager_id=manager_id,
            is_active=True,
            created_at=CREATED_AT,
            national_id=national_id,
            phone_number=phone_number,
        )
        return user_id

    def update_user(self, user_id, changes):
        user = self.rows.get(int(user_id))
        if not user:
            return False
        updated = replace(user, **dict(changes))
        self._check_unique(email=updated.email, work_id=updated.work_id, exclude_id=user.user_id)
        self.rows[user.user_id] = updated
        return True

    def set_active(self, user_id, *, is_active):
        return self.update_user(user_id, {"is_active": bool(is_active)})


class FakeGroupRepository:
    def __init__(self):
        self._ids = _Ids()
        self.rows: dict[int, AgentGroup] = {}
        self.members: list[tuple[int, int]] = []

    def get_by_id(self, group_id):
        return self.rows.get(int(group_id))

    def list_by_sales_staff(self, sales_staff_id):
        return [g for _, g in sorted(self.rows.items()) if g.sales_staff_id == int(sales_staff_id)]

    def list_by_leader(self, leader_id):
        return [g for _, g in sorted(self.rows.items()) if g.leader_id == int(leader_id)]

    def create_group(self, *, name, sales_staff_id, leader_id):
        group_id = self._ids.take()
        self.rows[group_id] = AgentGroup(
            group_id=group_id, name=name, sales_staff_id=int(sales_staff_id), leader_id=leader_id
        )
        return group_id

    def update_group(self, group_id, changes):
        group = self.rows.get(int(group_id))
        if not group:
            return False
        self.rows[group.group_id] = replace(group, **dict(changes))
        return True

    def add_member(self, *, group_id, agent_id):
        pair = (int(group_id), int(agent_id))
        if pair in self.members:
            raise ConflictError("Agent is already a member of this group")
        self.members.append(pair)

    def remove_member(self, *, group_id, agent_id):
        pair = (int(group_id), int(agent_id))
        if pair not in self.members:
            return False
        self.members.remove(pair)
        return True

    def list_member_ids(self, group_id):
        return sorted(a for g, a in self.members if g == int(group_id))


class FakeClientRepository:
    def __init__(self):
        self._ids = _Ids()
        self.rows: dict[int, Client] = {}

    def get_by_id(self, client_id):
        return self.rows.get(int(client_id))

    def list_by_agents(self, agent_ids):
        if agent_ids is None:
            return [c for _, c in sorted(self.rows.items())]
        wanted = {int(a) for a in agent_ids}
        return [c for _, c in sorted(self.rows.items()) if c.agent_id in wanted]

    def create_client(self, *, agent_id, created_at, **values):
        client_id = self._ids.take()
        self.rows[client_id] = Client(
            client_id=client_id, agent_id=int(agent_id), created_at=created_at, updated_at=created_at, **values
        )
        return client_id

    def update_client(self, client_id, changes, *, updated_at):
        client = self.rows.get(int(client_id))
        if not client:
            return False
        self.rows[client.client_id] = replace(client, updated_at=updated_at, **dict(changes))
        return True

    def delete_client(self, client_id):
        return self.rows.pop(int(client_id), None) is not None


class FakeAttendanceRepository:
    """Mirrors the unique (user_id, work_date) index: the check and insert are one atomic step."""

    def __init__(self):
        self._ids = _Ids()
        self._lock = threading.Lock()
        self.rows: dict[int, AttendanceRecord] = {}

    def get_for_user_and_date(self, user_id, work_date):
        return next(
            (r for r in self.rows.values() if r.user_id == int(user_id) and r.work_date == work_date), None
        )

    def list_by_date(self, work_date, *, user_ids=None):
        wanted = None if user_ids is None else {int(u) for u in user_ids}
        return [
            r
            for _, r in sorted(self.rows.items())
            if r.work_date == work_date and (wanted is None or r.user_id in wanted)
        ]

    def create_checkin(self, *, user_id, work_date, check_in_time, sector=None, location=None):
        with self._lock:
            if self.get_for_user_and_date(user_id, work_date):
                raise ConflictError("Attendance already recorded for this date")
            attendance_id = self._ids.take()
            self.rows[attendance_id] = AttendanceRecord(
                attendance_id=attendance_id,
                user_id=int(user_id),
                work_date=work_date,
                check_in_time=check_in_time,
                sector=sector,
                location=location,
            )
            return attendance_id


class FakeTimeFrameRepository:
    def __init__(self):
        self._ids = _Ids()
        self.rows: dict[int, AttendanceTimeFrame] = {}

    def get_by_id(self, frame_id):
        return self.rows.get(int(frame_id))

    def list_by_manager(self, manager_id):
        return [f for _, f in sorted(self.rows.items()) if f.manager_id == int(manager_id)]

    def create_time_frame(self, *, manager_id, start_time, end_time, created_at):
        frame_id = self._ids.take()
        self.rows[frame_id] = AttendanceTimeFrame(
            frame_id=frame_id,
            manager_id=int(manager_id),
            start_time=start_time,
            end_time=end_time,
            created_at=created_at,
            updated_at=created_at,
        )
        return frame_id

    def update_time_frame(self, frame_id, changes, *, updated_at):
        frame = self.rows.get(int(frame_id))
        if not frame:
            return False
        self.rows[frame.frame_id] = replace(frame, updated_at=updated_at, **dict(changes))
        return True


class FakeDailyReportRepository:
    def __init__(self):
        self._ids = _Ids()
        self._lock = threading.Lock()
        self.rows: dict[int, DailyReport] = {}

    def get_for_agent_and_date(self, agent_id, report_date):
        return next(
            (r for r in self.rows.values() if r.agent_id == int(agent_id) and r.report_date == report_date), None
        )

    def list_by_date(self, report_date, *, agent_ids=None):
        wanted = None if agent_ids is None else {int(a) for a in agent_ids}
        return [
            r
            for _, r in sorted(self.rows.items())
            if r.report_date == report_date and (wanted is None or r.agent_id in wanted)
        ]

    def create_report(self, *, agent_id, report_date, comment, clients_data, created_at):
        with self._lock:
            if self.get_for_agent_and_date(agent_id, report_date):
                raise ConflictError("Daily report already submitted for this date")
            report_id = self._ids.take()
            self.rows[report_id] = DailyReport(
                report_id=report_id,
                agent_id=int(agent_id),
                report_date=report_date,
                comment=comment,
                clients_data=clients_data,
                created_at=created_at,
            )
            return report_id


class FakeHelpRequestRepository:
    def __init__(self):
        self._ids = _Ids()
        self.rows: dict[int, HelpRequest] = {}

    def get_by_id(self, request_id):
        return self.rows.get(int(request_id))

    def list_requests(self, *, resolved=None):
        rows = sorted(self.rows.values(), key=lambda h: (h.created_at, h.request_id), reverse=True)
        return [h for h in rows if resolved is None or h.resolved == resolved]

    def create_request(self, *, name, email, message, created_at):
        request_id = self._ids.take()
        self.rows[request_id] = HelpRequest(
            request_id=request_id, name=name, email=email, message=message, created_at=created_at
        )
        return request_id

    def mark_resolved(self, request_id):
        row = self.rows.get(int(request_id))
        if not row:
            return False
        self.rows[row.request_id] = replace(row, resolved=True)
        return True


class FakeMessageRepository:
    def __init__(self):
        self._ids = _Ids()
        self.rows: dict[int, Message] = {}

    def get_by_id(self, message_id):
        return self.rows.get(int(message_id))

    def create_message(self, *, sender_id, receiver_id, content, sent_at):
        message_id = self._ids.take()
        self.rows[message_id] = Message(
            message_id=message_id,
            sender_id=int(sender_id),
            receiver_id=int(receiver_id),
            content=content,
            sent_at=sent_at,
        )
        return message_id

    def _ordered(self):
        return sorted(self.rows.values(), key=lambda m: (m.sent_at, m.message_id))

    def list_for_user(self, user_id):
        return [m for m in self._ordered() if int(user_id) in (m.sender_id, m.receiver_id)]

    def list_between(self, user_id, other_id):
        pair = {int(user_id), int(other_id)}
        return [m for m in self._ordered() if {m.sender_id, m.receiver_id} == pair]

    def mark_read(self, message_id):
        row = self.rows.get(int(message_id))
        if not row:
            return False
        self.rows[row.message_id] = replace(row, is_read=True)
        return True


class FakeActivityRepository:
    def __init__(self):
        self._ids = _Ids()
        self.rows: dict[int, Activity] = {}

    def create_activity(self, *, user_id, action, details, timestamp):
        activity_id = self._ids.take()
        self.rows[activity_id] = Activity(
            activity_id=activity_id, user_id=int(user_id), action=action, details=details, timestamp=timestamp
        )
        return activity_id

    def get_by_id(self, activity_id):
        return self.rows.get(int(activity_id))

    def list_recent(self, *, offset, limit):
        rows = sorted(self.rows.values(), key=lambda a: (a.timestamp, a.activity_id), reverse=True)
        return rows[offset : offset + limit]

    def count(self):
        return len(self.rows)

    def actions(self) -> list[str]:
        return [a.action for _, a in sorted(self.rows.items())]


class BrokenActivityRepository(FakeActivityRepository):
    def create_activity(self, *, user_id, action, details, timestamp):
        raise RuntimeError("activity store unavailable")


def make_repositories(*, activities: Optional[FakeActivityRepository] = None) -> Repositories:
    return Repositories(
        users=FakeUserRepository(),
        groups=FakeGroupRepository(),
        clients=FakeClientRepository(),
        attendance=FakeAttendanceRepository(),
        time_frames=FakeTimeFrameRepository(),
        reports=FakeDailyReportRepository(),
        help_requests=FakeHelpRequestRepository(),
        messages=FakeMessageRepository(),
        activities=activities if activities is not None else FakeActivityRepository(),
    )


PASSWORD = "secret123"
# Low iteration count keeps the suite fast; still a real werkzeug hash.
FAST_HASH = "pbkdf2:sha256:1000"


def add_user(container, work_id: str, role: Role, manager_id=None, *, first="Test", last=None) -> User:
    user_id = container.repos.users.create_user(
        first_name=first,
        last_name=last or work_id,
        email=f"{work_id.lower()}@example.com",
        work_id=work_id,
        password_hash=generate_password_hash(PASSWORD, method=FAST_HASH),
        role=role,
        manager_id=manager_id,
    )
    return container.repos.users.get_by_id(user_id)
