from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from ..authorization.policy import Action, AuthorizationPolicy, Resource
from ..common.datetime_utils import now_local
from ..common.validators import optional_str
from ..core.exceptions import NotFoundError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from .model import DailyReport
from .repository import DailyReportRepository


class DailyReportService:
    def __init__(self, reports: DailyReportRepository, users: UserRepository, policy: AuthorizationPolicy):
        self._reports = reports
        self._users = users
        self._policy = policy

    def submit(self, actor: User, *, comment: Any = None, clients_data: Any = None, now: Optional[datetime] = None) -> DailyReport:
        self._policy.require(actor, Resource.DAILY_REPORTS, Action.CREATE)
        if clients_data is not None and not isinstance(clients_data, (list, dict)):
            raise ValidationError("clientsData must be a list or an object")

        now = now or now_local()
        self._reports.create_report(
            agent_id=actor.user_id,
            report_date=now.date(),
            comment=optional_str(comment, "Comment"),
            clients_data=clients_data,
            created_at=now,
        )
        report = self._reports.get_for_agent_and_date(actor.user_id, now.date())
        if report is None:
            raise NotFoundError("Daily report not found")
        return report

    def own_report(self, actor: User, report_date: date) -> Optional[DailyReport]:
        self._policy.require(actor, Resource.DAILY_REPORTS, Action.READ)
        return self._reports.get_for_agent_and_date(actor.user_id, report_date)

    def list_for_date(self, actor: User, report_date: date) -> list[dict]:
        owners = self._policy.visible_owner_ids(actor, Resource.DAILY_REPORTS)
        reports = self._reports.list_by_date(report_date, agent_ids=owners)
        people = {u.user_id: u for u in self._users.list_by_ids({r.agent_id for r in reports})}
        return [
            {**r.to_dict(), "agent": people[r.agent_id].to_contact() if r.agent_id in people else None}
            for r in reports
        ]
