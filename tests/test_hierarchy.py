from __future__ import annotations

from agent_management.core.constants import MAX_HIERARCHY_DEPTH
from agent_management.core.enums import Role


def test_transitive_subordinates_walks_whole_subtree(container, org):
    found = container.hierarchy.transitive_subordinates_of(org.manager.user_id)

    assert {u.user_id for u in found} == {
        org.sales.user_id,
        org.sales2.user_id,
        org.agent.user_id,
        org.agent2.user_id,
        org.leader.user_id,
    }


def test_transitive_subordinates_role_filter(container, org):
    found = container.hierarchy.transitive_subordinates_of(org.manager.user_id, Role.field_roles())

    assert {u.user_id for u in found} == {org.agent.user_id, org.agent2.user_id, org.leader.user_id}
    assert all(u.role.is_field_role for u in found)


def test_transitive_subordinates_survives_manager_cycle(container, org):
    # Corrupt data: the manager now "reports to" one of their own agents.
    container.repos.users.update_user(org.manager.user_id, {"manager_id": org.agent.user_id})

    found = container.hierarchy.transitive_subordinates_of(org.manager.user_id)
    ids = [u.user_id for u in found]

    assert len(ids) == len(set(ids))
    assert org.manager.user_id not in ids

    from_agent = [u.user_id for u in container.hierarchy.transitive_subordinates_of(org.agent.user_id)]
    assert org.agent.user_id not in from_agent
    assert len(from_agent) == len(set(from_agent))


def test_chain_from_agent_terminates_within_depth(container, org):
    chain = container.hierarchy.chain_of(org.agent.user_id)

    assert [u.user_id for u in chain] == [org.sales.user_id, org.manager.user_id]
    assert len(chain) <= MAX_HIERARCHY_DEPTH


def test_chain_stops_on_cycle(container, org):
    container.repos.users.update_user(org.manager.user_id, {"manager_id": org.agent.user_id})

    chain = container.hierarchy.chain_of(org.agent.user_id)

    assert [u.user_id for u in chain] == [org.sales.user_id, org.manager.user_id]


def test_superior_of_dangling_manager_is_none(container, org):
    container.repos.users.update_user(org.agent.user_id, {"manager_id": 9999})

    assert container.hierarchy.superior_of(org.agent.user_id) is None
    assert container.hierarchy.chain_of(org.agent.user_id) == []


def test_superior_of_unknown_user_is_none(container, org):
    assert container.hierarchy.superior_of(4242) is None


def test_team_of_collects_members_of_led_groups(container, org):
    groups = container.repos.groups
    g1 = groups.create_group(name="North", sales_staff_id=org.sales.user_id, leader_id=org.leader.user_id)
    g2 = groups.create_group(name="South", sales_staff_id=org.sales.user_id, leader_id=org.leader.user_id)
    groups.add_member(group_id=g1, agent_id=org.agent.user_id)
    groups.add_member(group_id=g2, agent_id=org.agent.user_id)

    team = container.hierarchy.team_of(org.leader.user_id)

    assert [u.user_id for u in team] == [org.agent.user_id]


def test_group_members_only_returns_agents(container, org):
    groups = container.repos.groups
    gid = groups.create_group(name="Mixed", sales_staff_id=org.sales.user_id, leader_id=None)
    groups.add_member(group_id=gid, agent_id=org.agent.user_id)
    # Bypasses the service check on purpose.
    groups.add_member(group_id=gid, agent_id=org.leader.user_id)

    members = container.hierarchy.group_members_of(gid)

    assert [u.user_id for u in members] == [org.agent.user_id]
