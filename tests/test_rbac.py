"""
Unit tests for RBAC – capability table, default routes and the navigation guard.
"""

import pytest

from evalconsole.config import (
    ROUTE_DASHBOARD,
    ROUTE_EMPLOYEES,
    ROUTE_LOGIN,
    ROUTE_MY_EVALUATIONS,
    ROUTE_ORG_CONFIG,
)
from evalconsole.models import Role, Session, User
from evalconsole.rbac import can_access, capabilities, default_route, menu_items, resolve_navigation


# ── Helpers ──────────────────────────────────────────────────────────

def session_for(role_name, authenticated=True, loading=False):
    user = User(id=1, email="u@x.com", role=Role(id=1, name=role_name) if role_name is not None else None)
    return Session(
        token="t" if authenticated else None,
        user=user if authenticated else None,
        is_authenticated=authenticated,
        is_loading=loading,
    )


# ── Tests: capabilities ──────────────────────────────────────────────

def test_admin_has_everything():
    caps = capabilities("admin")
    assert caps.can_access_dashboard
    assert caps.can_manage_employees
    assert caps.can_manage_evaluations
    assert caps.is_admin_only
    assert caps.default_route == ROUTE_DASHBOARD


def test_hr_manager_lacks_org_config():
    caps = capabilities("HR_Manager")
    assert caps.can_access_dashboard
    assert caps.can_manage_employees
    assert not caps.is_admin_only


@pytest.mark.parametrize("role", ["employee", "evaluator", "supervisor", "Employee "])
def test_personal_roles(role):
    caps = capabilities(role)
    assert not caps.can_access_dashboard
    assert not caps.can_manage_employees
    assert not caps.can_manage_evaluations
    assert not caps.is_admin_only
    assert caps.can_access_my_evaluations


@pytest.mark.parametrize("role", ["", None, "superuser", "root"])
def test_unknown_roles_get_least_privilege(role):
    caps = capabilities(role)
    assert not caps.can_access_dashboard
    assert not caps.is_admin_only
    assert caps.can_access_my_evaluations


def test_default_routes():
    assert default_route("admin") == ROUTE_DASHBOARD
    assert default_route("hr_manager") == ROUTE_DASHBOARD
    assert default_route("employee") == ROUTE_MY_EVALUATIONS
    assert default_route("mystery") == ROUTE_MY_EVALUATIONS


def test_can_access_by_screen_or_path():
    assert can_access("admin", "organizational_config")
    assert can_access("admin", ROUTE_ORG_CONFIG)
    assert not can_access("hr_manager", ROUTE_ORG_CONFIG)
    assert not can_access("admin", "/nowhere")


# ── Tests: resolve_navigation ────────────────────────────────────────

def test_guard_unauthenticated_redirects_to_login():
    decision = resolve_navigation(Session(), "dashboard")
    assert (decision.action, decision.target) == ("redirect", ROUTE_LOGIN)


def test_guard_loading_defers_decision():
    decision = resolve_navigation(Session(is_loading=True), "dashboard")
    assert decision.action == "loading"
    assert decision.target is None


def test_guard_denied_redirects_to_default_route():
    decision = resolve_navigation(session_for("employee"), "dashboard")
    assert (decision.action, decision.target) == ("redirect", ROUTE_MY_EVALUATIONS)

    decision = resolve_navigation(session_for("hr_manager"), "organizational_config")
    assert (decision.action, decision.target) == ("redirect", ROUTE_DASHBOARD)


def test_guard_allows_permitted_screen():
    decision = resolve_navigation(session_for("hr_manager"), ROUTE_EMPLOYEES)
    assert (decision.action, decision.target, decision.screen) == ("render", ROUTE_EMPLOYEES, "employees")


def test_guard_user_without_role():
    decision = resolve_navigation(session_for(None), "dashboard")
    assert (decision.action, decision.target) == ("redirect", ROUTE_MY_EVALUATIONS)


def test_guard_is_reevaluated_per_session():
    assert resolve_navigation(session_for("admin"), "dashboard").action == "render"
    assert resolve_navigation(session_for("employee"), "dashboard").action == "redirect"


def test_guard_unknown_screen():
    decision = resolve_navigation(session_for("admin"), "payroll")
    assert (decision.action, decision.target) == ("redirect", ROUTE_DASHBOARD)


# ── Tests: menu_items ────────────────────────────────────────────────

def test_menu_items_follow_capabilities():
    assert [i["id"] for i in menu_items("admin")] == [
        "dashboard", "employees", "evaluations", "organizational_config", "my_evaluations",
    ]
    assert [i["id"] for i in menu_items("employee")] == ["my_evaluations"]
