from __future__ import annotations

import pytest

from agent_management.container import build_services
from agent_management.core.enums import Role
from agent_management.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from fakes import PASSWORD, BrokenActivityRepository, add_user, make_repositories


def _new_user(**overrides):
    data = {
        "first_name": "Nina",
        "last_name": "Cole",
        "email": "nina@example.com",
        "work_id": "NEW001",
        "password": "hunter22",
    }
    data.update(overrides)
    return data


def test_admin_creates_manager_without_parent(container, org):
    created = container.user_service.create_subordinate(org.admin, role=Role.MANAGER, **_new_user())

    assert created.role == Role.MANAGER
    assert created.manager_id is None
    assert created.is_active is True


def test_manager_creates_sales_staff_under_self(container, org):
    created = container.user_service.create_subordinate(org.manager, role=Role.SALES_STAFF, **_new_user())

    assert created.manager_id == org.manager.user_id


def test_sales_staff_creates_team_leader_and_agent(container, org):
    svc = container.user_service
    agent = svc.create_subordinate(org.sales, role=Role.AGENT, **_new_user())
    leader = svc.create_subordinate(
        org.sales, role=Role.TEAM_LEADER, **_new_user(email="lead@example.com", work_id="NEW002")
    )

    assert agent.manager_id == org.sales.user_id
    assert leader.manager_id == org.sales.user_id


def test_create_records_activity_with_details(container, org):
    created = container.user_service.create_subordinate(org.manager, role=Role.SALES_STAFF, **_new_user())

    last = container.repos.activities.rows[max(container.repos.activities.rows)]
    assert last.action == "create_user"
    assert last.user_id == org.manager.user_id
    assert last.details == f"Manager created sales staff: Nina Cole (ID: {created.user_id})"


@pytest.mark.parametrize(
    "who,role",
    [
        ("manager", Role.MANAGER),
        ("sales", Role.ADMIN),
        ("admin", Role.SALES_STAFF),
        ("agent", Role.AGENT),
        ("leader", Role.AGENT),
    ],
)
def test_invalid_role_transition_is_rejected(container, org, who, role):
    before = container.repos.users.count()

    with pytest.raises(ValidationError):
        container.user_service.create_subordinate(getattr(org, who), role=role, **_new_user())

    assert container.repos.users.count() == before


def test_duplicate_email_and_work_id_conflict(container, org):
    svc = container.user_service

    with pytest.raises(ConflictError, match="Email already in use"):
        svc.create_subordinate(org.sales, role=Role.AGENT, **_new_user(email=org.agent.email))
    with pytest.raises(ConflictError, match="Work ID already in use"):
        svc.create_subordinate(org.sales, role=Role.AGENT, **_new_user(work_id=org.agent.work_id))


def test_create_validates_input(container, org):
    svc = container.user_service

    with pytest.raises(ValidationError, match="Password must be at least 6 characters"):
        svc.create_subordinate(org.sales, role=Role.AGENT, **_new_user(password="123"))
    with pytest.raises(ValidationError, match="valid email"):
        svc.create_subordinate(org.sales, role=Role.AGENT, **_new_user(email="not-an-email"))
    with pytest.raises(ValidationError):
        svc.create_subordinate(org.sales, role=Role.AGENT, **_new_user(first_name="  "))


def test_create_stores_email_lowercased_and_hashes_password(container, org):
    created = container.user_service.create_subordinate(
        org.sales, role=Role.AGENT, **_new_user(email="Nina@Example.COM")
    )

    assert created.email == "nina@example.com"
    assert created.password_hash != "hunter22"


def test_create_succeeds_when_activity_log_fails():
    container = build_services(make_repositories(activities=BrokenActivityRepository()))
    admin = add_user(container, "ADM001", Role.ADMIN)

    created = container.user_service.create_subordinate(admin, role=Role.MANAGER, **_new_user())

    assert container.repos.users.get_by_id(created.user_id) is not None


def test_list_in_scope_per_role(container, org):
    svc = container.user_service

    own = svc.list_in_scope(org.sales, Role.field_roles())
    subtree = svc.list_in_scope(org.manager, Role.field_roles())
    everyone = svc.list_in_scope(org.admin, Role.field_roles())

    assert {u.user_id for u in own} == {org.agent.user_id, org.leader.user_id}
    assert {u.user_id for u in subtree} == {org.agent.user_id, org.agent2.user_id, org.leader.user_id}
    assert [u.user_id for u in everyone] == sorted(u.user_id for u in everyone)
    assert {u.user_id for u in everyone} == {org.agent.user_id, org.agent2.user_id, org.leader.user_id}


def test_list_in_scope_denied_without_grant(container, org):
    with pytest.raises(AuthorizationError):
        container.user_service.list_in_scope(org.agent, [Role.SALES_STAFF])


def test_list_users_is_admin_only(container, org):
    assert len(container.user_service.list_users(org.admin)) == 7
    assert [u.user_id for u in container.user_service.list_users(org.admin, role=Role.AGENT)] == [
        org.agent.user_id,
        org.agent2.user_id,
    ]

    with pytest.raises(AuthorizationError):
        container.user_service.list_users(org.manager)


def test_update_ignores_ownership_and_identity_fields(container, org, refresh):
    updated = container.user_service.update_subordinate(
        org.sales,
        org.agent.user_id,
        role_family=Role.AGENT,
        changes={
            "firstName": "Alan",
            "managerId": org.sales2.user_id,
            "role": "Admin",
            "id": 999,
            "isActive": False,
        },
    )

    assert updated.first_name == "Alan"
    assert updated.manager_id == org.sales.user_id
    assert updated.role == Role.AGENT
    assert updated.user_id == org.agent.user_id
    assert refresh(org.agent).is_active is True


def test_update_rejects_foreign_sales_staff(container, org, refresh):
    with pytest.raises(AuthorizationError):
        container.user_service.update_subordinate(
            org.sales2, org.agent.user_id, role_family=Role.AGENT, changes={"firstName": "X"}
        )

    assert refresh(org.agent).first_name == org.agent.first_name


def test_update_rejects_role_family_mismatch(container, org):
    with pytest.raises(ValidationError, match="User is not a sales staff"):
        container.user_service.update_subordinate(
            org.manager, org.agent.user_id, role_family=Role.SALES_STAFF, changes={"firstName": "X"}
        )


def test_update_unknown_user_is_not_found(container, org):
    with pytest.raises(NotFoundError, match="Agent not found"):
        container.user_service.update_subordinate(org.sales, 4242, role_family=Role.AGENT, changes={})


def test_update_email_conflict_excludes_self(container, org):
    svc = container.user_service

    same = svc.update_subordinate(
        org.sales, org.agent.user_id, role_family=Role.AGENT, changes={"email": org.agent.email}
    )
    assert same.email == org.agent.email

    with pytest.raises(ConflictError):
        svc.update_subordinate(
            org.sales, org.agent.user_id, role_family=Role.AGENT, changes={"email": org.leader.email}
        )


def test_password_update_allows_login_with_new_password(container, org):
    container.user_service.update_subordinate(
        org.sales, org.agent.user_id, role_family=Role.AGENT, changes={"password": "brandnew"}
    )

    user = container.auth_service.authenticate(org.agent.work_id, org.agent.email, "brandnew")
    assert user.user_id == org.agent.user_id


def test_deactivated_agent_cannot_login_but_clients_remain(container, org, refresh):
    client = container.client_service.create_client(org.agent, {"firstName": "C", "lastName": "One"})

    container.user_service.deactivate_subordinate(org.sales, org.agent.user_id, role_family=Role.AGENT)

    assert refresh(org.agent).is_active is False
    with pytest.raises(AuthenticationError, match="Account inactive"):
        container.auth_service.authenticate(org.agent.work_id, org.agent.email, PASSWORD)
    visible = container.client_service.list_clients(org.sales)
    assert [c.client_id for c in visible] == [client.client_id]


def test_deactivate_requires_ownership(container, org, refresh):
    with pytest.raises(AuthorizationError):
        container.user_service.deactivate_subordinate(org.sales2, org.agent.user_id, role_family=Role.AGENT)

    assert refresh(org.agent).is_active is True


def test_admin_toggles_activation(container, org, refresh):
    svc = container.user_service

    svc.set_active(org.admin, org.sales.user_id, is_active=False)
    assert refresh(org.sales).is_active is False

    svc.set_active(org.admin, org.sales.user_id, is_active=True)
    assert refresh(org.sales).is_active is True
    assert container.repos.activities.actions()[-2:] == ["deactivate_user", "activate_user"]


def test_admin_cannot_be_deactivated(container, org):
    with pytest.raises(ValidationError):
        container.user_service.set_active(org.admin, org.admin.user_id, is_active=False)


def test_set_active_requires_admin(container, org):
    with pytest.raises(AuthorizationError):
        container.user_service.set_active(org.manager, org.sales.user_id, is_active=False)


def test_authenticate_lowercases_email_and_logs(container, org):
    user = container.auth_service.authenticate(org.agent.work_id, org.agent.email.upper(), PASSWORD)

    assert user.user_id == org.agent.user_id
    assert container.repos.activities.actions()[-1] == "login"


@pytest.mark.parametrize(
    "work_id,email,password,message",
    [
        ("", "agt001@example.com", PASSWORD, "Both Work ID and Email are required"),
        ("AGT001", None, PASSWORD, "Both Work ID and Email are required"),
        ("AGT001", "agt001@example.com", "wrong-pass", "Invalid credentials"),
        ("AGT999", "agt001@example.com", PASSWORD, "Invalid credentials"),
        ("AGT001", "agt001@example.com", None, "Invalid credentials"),
    ],
)
def test_authenticate_failures(container, org, work_id, email, password, message):
    with pytest.raises(AuthenticationError, match=message):
        container.auth_service.authenticate(work_id, email, password)


def test_resolve_session_user_rejects_inactive(container, org):
    container.repos.users.set_active(org.agent.user_id, is_active=False)

    with pytest.raises(AuthenticationError):
        container.auth_service.resolve_session_user(org.agent.user_id)
    with pytest.raises(AuthenticationError):
        container.auth_service.resolve_session_user(None)
