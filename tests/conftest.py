from __future__ import annotations

from dataclasses import dataclass

import pytest

from agent_management.container import Container, build_services
from agent_management.core.enums import Role
from agent_management.main import create_app
from agent_management.users.model import User
from fakes import PASSWORD, add_user, make_repositories


@dataclass
class Org:
    """Admin -> Manager -> {S, S2}; S -> {A, TL}; S2 -> A2."""

    admin: User
    manager: User
    sales: User
    sales2: User
    agent: User
    agent2: User
    leader: User


@pytest.fixture
def container() -> Container:
    return build_services(make_repositories())


@pytest.fixture
def org(container) -> Org:
    admin = add_user(container, "ADM001", Role.ADMIN, first="Ada")
    manager = add_user(container, "MGR001", Role.MANAGER, first="Mia")
    sales = add_user(container, "SLF001", Role.SALES_STAFF, manager.user_id, first="Sam")
    sales2 = add_user(container, "SLF002", Role.SALES_STAFF, manager.user_id, first="Sue")
    agent = add_user(container, "AGT001", Role.AGENT, sales.user_id, first="Al")
    agent2 = add_user(container, "AGT002", Role.AGENT, sales2.user_id, first="Bo")
    leader = add_user(container, "TLD001", Role.TEAM_LEADER, sales.user_id, first="Tia")
    return Org(admin=admin, manager=manager, sales=sales, sales2=sales2, agent=agent, agent2=agent2, leader=leader)


@pytest.fixture
def refresh(container):
    def _refresh(user: User) -> User:
        return container.repos.users.get_by_id(user.user_id)

    return _refresh


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(user: User, password: str = PASSWORD):
        return client.post(
            "/api/login", json={"workId": user.work_id, "email": user.email, "password": password}
        )

    return _login
