from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .activities.mysql_activity_repository import MySQLActivityRepository
from .activities.repository import ActivityRepository
from .activities.service import ActivityService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.mysql_time_frame_repository import MySQLTimeFrameRepository
from .attendance.repository import AttendanceRepository, TimeFrameRepository
from .attendance.service import AttendanceService
from .authorization.policy import AuthorizationPolicy
from .clients.mysql_client_repository import MySQLClientRepository
from .clients.repository import ClientRepository
from .clients.service import ClientService
from .common.web import SessionGuard
from .database.connection import DBConfig, DatabaseConnection
from .groups.mysql_group_repository import MySQLGroupRepository
from .groups.repository import GroupRepository
from .groups.service import GroupService
from .help_requests.mysql_help_request_repository import MySQLHelpRequestRepository
from .help_requests.repository import HelpRequestRepository
from .help_requests.service import HelpRequestService
from .hierarchy.resolver import HierarchyResolver
from .messages.mysql_message_repository import MySQLMessageRepository
from .messages.repository import MessageRepository
from .messages.service import MessageService
from .reports.mysql_report_repository import MySQLDailyReportRepository
from .reports.repository import DailyReportRepository
from .reports.service import DailyReportService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Repositories:
    users: UserRepository
    groups: GroupRepository
    clients: ClientRepository
    attendance: AttendanceRepository
    time_frames: TimeFrameRepository
    reports: DailyReportRepository
    help_requests: HelpRequestRepository
    messages: MessageRepository
    activities: ActivityRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    repos: Repositories

    hierarchy: HierarchyResolver
    policy: AuthorizationPolicy
    session_guard: SessionGuard

    activity_service: ActivityService
    auth_service: AuthService
    user_service: UserService
    group_service: GroupService
    client_service: ClientService
    attendance_service: AttendanceService
    report_service: DailyReportService
    help_request_service: HelpRequestService
    message_service: MessageService


def build_services(
    repos: Repositories,
    *,
    conn: Optional[DatabaseConnection] = None,
    strict_manager_messaging: bool = False,
) -> Container:
    """Wire services on top of any set of repositories (MySQL or in-memory)."""

    hierarchy = HierarchyResolver(repos.users, repos.groups)
    policy = AuthorizationPolicy(hierarchy, strict_manager_messaging=strict_manager_messaging)

    activity_service = ActivityService(repos.activities, policy)
    auth_service = AuthService(repos.users, activity_service)

    return Container(
        conn=conn,
        repos=repos,
        hierarchy=hierarchy,
        policy=policy,
        session_guard=SessionGuard(auth_service),
        activity_service=activity_service,
        auth_service=auth_service,
        user_service=UserService(repos.users, policy, activity_service),
        group_service=GroupService(repos.groups, repos.users, policy, activity_service),
        client_service=ClientService(repos.clients, policy),
        attendance_service=AttendanceService(repos.attendance, repos.time_frames, repos.users, policy),
        report_service=DailyReportService(repos.reports, repos.users, policy),
        help_request_service=HelpRequestService(repos.help_requests, policy, activity_service),
        message_service=MessageService(repos.messages, repos.users, policy),
    )


def build_container(
    *,
    db_config: dict,
    strict_manager_messaging: bool = False,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    repos = Repositories(
        users=MySQLUserRepository(conn),
        groups=MySQLGroupRepository(conn),
        clients=MySQLClientRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        time_frames=MySQLTimeFrameRepository(conn),
        reports=MySQLDailyReportRepository(conn),
        help_requests=MySQLHelpRequestRepository(conn),
        messages=MySQLMessageRepository(conn),
        activities=MySQLActivityRepository(conn),
    )
    return build_services(
        repos,
        conn=conn,
        strict_manager_messaging=strict_manager_messaging,
    )
