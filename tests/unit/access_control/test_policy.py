from types import SimpleNamespace

import pytest

from projectdesk.access_control.policy import (
    AccessPolicy,
    Policy,
    Resource,
    project_resource,
    user_resource,
)
from projectdesk.errors import ForbiddenError


def make_user(id, role="member", org="org_1", super_admin=False, active=True):
    return SimpleNamespace(
        id=id, role=role, organization_id=org, is_super_admin=super_admin, is_active=active,
    )


@pytest.fixture
def project():
    p = SimpleNamespace(id="proj_1", organization_id="org_1", owner_id="u_owner")
    return project_resource(p, member_ids=["u_dev"])


@pytest.fixture
def engine():
    return AccessPolicy()


def test_evaluate_policy():
    engine = AccessPolicy()
    policy = Policy(name="t", resource="test", action="read", condition={"==": [{"var": "a"}, 1]})

    assert engine.evaluate_policy(policy, {"a": 1})
    assert not engine.evaluate_policy(policy, {"a": 2})


def test_broken_condition_does_not_match():
    engine = AccessPolicy()
    policy = Policy(name="broken", resource="test", action="read", condition={"no_such_op": [1]})

    assert not engine.evaluate_policy(policy, {})


@pytest.mark.parametrize("user, allowed", [
    (make_user("u_owner"), True),
    (make_user("u_pm", role="pm"), True),
    (make_user("u_admin", role="admin"), True),
    (make_user("u_root", role="admin", org="org_2", super_admin=True), True),
    (make_user("u_dev"), False),
    (make_user("u_out", role="pm", org="org_2"), False),
    (make_user("u_gone", role="admin", active=False), False),
])
def test_allocation_write(engine, project, user, allowed):
    assert engine.check_access(user, project, "allocation.write") is allowed


@pytest.mark.parametrize("user, allowed", [
    (make_user("u_dev"), True),
    (make_user("u_someone"), True),
    (make_user("u_dev", org="org_2"), True),
    (make_user("u_out", role="pm", org="org_2"), False),
    (make_user("u_nobody", org=None), False),
])
def test_allocation_read(engine, project, user, allowed):
    assert engine.check_access(user, project, "allocation.read") is allowed


def test_org_less_users_do_not_match_org_less_resources(engine):
    target = user_resource(SimpleNamespace(id="u_x", organization_id=None))
    assert not engine.check_access(make_user("u_y", role="pm", org=None), target, "capacity.write")


def test_capacity_write_requires_manager_in_same_org(engine):
    target = user_resource(SimpleNamespace(id="u_dev", organization_id="org_1"))

    assert engine.check_access(make_user("u_pm", role="pm"), target, "capacity.write")
    assert not engine.check_access(make_user("u_dev"), target, "capacity.write")
    assert engine.check_access(make_user("u_dev"), target, "capacity.read")
    assert not engine.check_access(make_user("u_out", role="admin", org="org_2"), target, "capacity.read")


def test_unknown_action_denied(engine, project):
    assert not engine.check_access(make_user("u_owner"), project, "allocation.approve")


def test_deny_overrides_allow():
    engine = AccessPolicy([
        Policy(name="allow-all", resource="*", action="*", condition={"==": [1, 1]}),
        Policy(
            name="deny-locked", resource="doc", action="*",
            condition={"==": [{"var": "resource.locked"}, True]}, effect="deny", priority=10,
        ),
    ])
    user = make_user("u1")

    assert engine.check_access(user, Resource("doc", {"locked": False}), "edit")
    assert not engine.check_access(user, Resource("doc", {"locked": True}), "edit")


def test_authorize_raises_forbidden(engine, project):
    with pytest.raises(ForbiddenError, match="Nope"):
        engine.authorize(make_user("u_dev"), project, "allocation.write", "Nope")

    engine.authorize(make_user("u_owner"), project, "allocation.write")
