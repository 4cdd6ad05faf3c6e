"""
Role-Based Access Control – capability table, default routes and the
navigation guard evaluated on every screen change.
"""

import logging
from typing import Dict, List, Optional

from evalconsole.config import (
    ROUTE_DASHBOARD,
    ROUTE_EMPLOYEES,
    ROUTE_EVALUATIONS,
    ROUTE_LOGIN,
    ROUTE_MY_EVALUATIONS,
    ROUTE_ORG_CONFIG,
)
from evalconsole.models import RoleCapabilitySet, RouteDecision, Session

logger = logging.getLogger(__name__)

_MANAGER = {
    "can_access_dashboard": True,
    "can_manage_employees": True,
    "can_manage_evaluations": True,
    "can_access_my_evaluations": True,
    "is_admin_only": False,
}
_PERSONAL = {
    "can_access_dashboard": False,
    "can_manage_employees": False,
    "can_manage_evaluations": False,
    "can_access_my_evaluations": True,
    "is_admin_only": False,
}

CAPABILITY_TABLE: Dict[str, Dict[str, bool]] = {
    "admin": {**_MANAGER, "is_admin_only": True},
    "hr_manager": dict(_MANAGER),
    "supervisor": dict(_PERSONAL),
    "evaluator": dict(_PERSONAL),
    "employee": dict(_PERSONAL),
}

# screen id -> (route, capability flag)
SCREENS = {
    "dashboard": (ROUTE_DASHBOARD, "can_access_dashboard"),
    "employees": (ROUTE_EMPLOYEES, "can_manage_employees"),
    "evaluations": (ROUTE_EVALUATIONS, "can_manage_evaluations"),
    "organizational_config": (ROUTE_ORG_CONFIG, "is_admin_only"),
    "my_evaluations": (ROUTE_MY_EVALUATIONS, "can_access_my_evaluations"),
}

MENU = [
    ("dashboard", "Dashboard"),
    ("employees", "Gestión de empleados"),
    ("evaluations", "Gestión de evaluaciones"),
    ("organizational_config", "Configuración organizacional"),
    ("my_evaluations", "Mis evaluaciones"),
]


def _role_key(role: Optional[str]) -> str:
    return (role or "").strip().lower()


def capabilities(role: Optional[str]) -> RoleCapabilitySet:
    """Capability set for *role*; unknown or empty roles get personal access only."""
    key = _role_key(role)
    flags = CAPABILITY_TABLE.get(key)
    if flags is None:
        if key:
            logger.info("Unknown role %r, falling back to personal evaluations only", role)
        flags = _PERSONAL
    return RoleCapabilitySet(role=key, default_route=_default_route_for(flags), **flags)


def _default_route_for(flags: Dict[str, bool]) -> str:
    if flags["can_access_dashboard"]:
        return ROUTE_DASHBOARD
    if flags["can_access_my_evaluations"]:
        return ROUTE_MY_EVALUATIONS
    return ROUTE_MY_EVALUATIONS


def default_route(role: Optional[str]) -> str:
    """Landing route for *role*."""
    return capabilities(role).default_route


def screen_for(path_or_screen: str) -> Optional[str]:
    """Resolve a screen id or route path to a screen id."""
    if path_or_screen in SCREENS:
        return path_or_screen
    for screen, (route, _flag) in SCREENS.items():
        if route == path_or_screen:
            return screen
    return None


def can_access(role: Optional[str], screen: str) -> bool:
    resolved = screen_for(screen)
    if resolved is None:
        return False
    _route, flag = SCREENS[resolved]
    return bool(getattr(capabilities(role), flag))


def resolve_navigation(session: Session, screen: str) -> RouteDecision:
    """
    Decide what happens when the user asks for *screen*.

    Evaluated on every navigation; nothing here is cached because the
    session may change between two calls.
    """
    if session.is_loading:
        return RouteDecision(action="loading", screen=screen, reason="session is being restored")

    if not session.is_authenticated:
        return RouteDecision(action="redirect", target=ROUTE_LOGIN, screen=screen, reason="not authenticated")

    role = session.role_name
    resolved = screen_for(screen)
    if resolved is None:
        return RouteDecision(
            action="redirect", target=default_route(role), screen=screen,
            reason=f"unknown screen '{screen}'",
        )

    if not can_access(role, resolved):
        return RouteDecision(
            action="redirect", target=default_route(role), screen=resolved,
            reason=f"role '{_role_key(role)}' cannot access {resolved}",
        )

    route, _flag = SCREENS[resolved]
    return RouteDecision(action="render", target=route, screen=resolved)


def menu_items(role: Optional[str]) -> List[Dict[str, str]]:
    """Sidebar entries visible to *role*, in display order."""
    items = []
    for screen, label in MENU:
        if can_access(role, screen):
            route, _flag = SCREENS[screen]
            items.append({"id": screen, "label": label, "path": route})
    return items
