from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from agent_management.core.exceptions import AuthorizationError, NotFoundError, ValidationError

T0 = datetime(2026, 5, 4, 9, 0, 0)


def _at(minutes):
    return T0 + timedelta(minutes=minutes)


def test_agent_messages_own_sales_staff(container, org):
    message = container.message_service.send(
        org.agent, receiver_id=org.sales.user_id, content="Need help", now=T0
    )

    assert message.sender_id == org.agent.user_id
    assert message.receiver_id == org.sales.user_id
    assert message.is_read is False


def test_agent_cannot_message_foreign_sales_staff(container, org):
    with pytest.raises(AuthorizationError, match="not allowed"):
        container.message_service.send(org.agent, receiver_id=org.sales2.user_id, content="Hi")

    assert container.repos.messages.rows == {}


def test_send_validates_receiver_and_content(container, org):
    svc = container.message_service

    with pytest.raises(NotFoundError, match="Receiver not found"):
        svc.send(org.agent, receiver_id=4242, content="Hi")
    with pytest.raises(ValidationError):
        svc.send(org.agent, receiver_id=org.sales.user_id, content="   ")
    with pytest.raises(ValidationError):
        svc.send(org.agent, receiver_id="abc", content="Hi")


def test_list_messages_includes_contacts(container, org):
    container.message_service.send(org.sales, receiver_id=org.agent.user_id, content="Morning", now=T0)

    [entry] = container.message_service.list_messages(org.agent)

    assert entry["sender"]["workId"] == org.sales.work_id
    assert entry["receiver"]["id"] == org.agent.user_id


def test_conversations_group_by_counterpart(container, org):
    svc = container.message_service
    svc.send(org.agent, receiver_id=org.sales.user_id, content="one", now=_at(0))
    svc.send(org.sales, receiver_id=org.agent.user_id, content="two", now=_at(1))
    svc.send(org.sales, receiver_id=org.agent.user_id, content="three", now=_at(2))
    svc.send(org.leader, receiver_id=org.sales.user_id, content="lead", now=_at(3))

    for_sales = svc.conversations(org.sales)
    for_agent = svc.conversations(org.agent)

    assert [c["user"]["id"] for c in for_sales] == [org.leader.user_id, org.agent.user_id]
    assert for_sales[0]["unreadCount"] == 1
    assert for_sales[1]["unreadCount"] == 1
    assert for_sales[1]["lastMessage"]["content"] == "three"
    assert for_agent[0]["unreadCount"] == 2


def test_thread_is_oldest_first(container, org):
    svc = container.message_service
    svc.send(org.sales, receiver_id=org.agent.user_id, content="later", now=_at(5))
    svc.send(org.agent, receiver_id=org.sales.user_id, content="earlier", now=_at(1))
    svc.send(org.sales, receiver_id=org.leader.user_id, content="elsewhere", now=_at(2))

    thread = svc.thread(org.agent, org.sales.user_id)

    assert [m["content"] for m in thread] == ["earlier", "later"]


def test_mark_read_only_by_receiver(container, org):
    svc = container.message_service
    message = svc.send(org.agent, receiver_id=org.sales.user_id, content="ping", now=T0)

    with pytest.raises(AuthorizationError):
        svc.mark_read(org.agent, message.message_id)

    updated = svc.mark_read(org.sales, message.message_id)

    assert updated.is_read is True
    assert svc.conversations(org.sales)[0]["unreadCount"] == 0


def test_mark_read_unknown_message(container, org):
    with pytest.raises(NotFoundError):
        container.message_service.mark_read(org.sales, 99)


def test_available_receivers_can_all_be_messaged(container, org):
    svc = container.message_service

    for receiver in svc.available_receivers(org.manager):
        svc.send(org.manager, receiver_id=receiver.user_id, content="hello", now=T0)

    assert len(container.repos.messages.rows) == 3
