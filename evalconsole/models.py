"""
Domain dataclasses used across the console.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class CanonicalStatus(str, Enum):
    """The four evaluation states every raw status collapses to."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


def as_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


# ── Identity ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Role:
    id: Optional[int]
    name: str


@dataclass(frozen=True)
class Position:
    id: Optional[int]
    name: str
    department: str = ""


@dataclass(frozen=True)
class User:
    """Authenticated identity as returned by the identity endpoint."""
    id: int
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    role: Optional[Role] = None
    position: Optional[Position] = None
    is_active: bool = True
    hire_date: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def role_name(self) -> str:
        """Role name used for RBAC decisions; empty when the user has no role."""
        if self.role is None or not self.role.name:
            return ""
        return self.role.name

    @property
    def display_name(self) -> str:
        full = f"{self.first_name} {self.last_name}".strip()
        return full or self.email

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        role = data.get("role")
        if isinstance(role, dict):
            role = Role(id=as_int(role.get("id")), name=str(role.get("name") or ""))
        elif isinstance(role, str):
            role = Role(id=as_int(data.get("role_id")), name=role)
        else:
            role = None

        position = data.get("position")
        if isinstance(position, dict):
            position = Position(
                id=as_int(position.get("id")),
                name=str(position.get("name") or ""),
                department=str(position.get("department") or ""),
            )
        elif isinstance(position, str):
            position = Position(
                id=as_int(data.get("position_id")),
                name=position,
                department=str(data.get("department") or ""),
            )
        else:
            position = None

        first_name = data.get("first_name")
        last_name = data.get("last_name")
        if first_name is None and last_name is None and data.get("name"):
            first_name, _, last_name = str(data["name"]).partition(" ")

        return cls(
            id=int(data["id"]),
            email=str(data.get("email") or ""),
            first_name=str(first_name or ""),
            last_name=str(last_name or ""),
            role=role,
            position=position,
            is_active=bool(data.get("is_active", True)),
            hire_date=data.get("hire_date"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": {"id": self.role.id, "name": self.role.name} if self.role else None,
            "position": (
                {
                    "id": self.position.id,
                    "name": self.position.name,
                    "department": self.position.department,
                }
                if self.position else None
            ),
            "is_active": self.is_active,
            "hire_date": self.hire_date,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class Session:
    """Snapshot of the current authentication state."""
    token: Optional[str] = None
    refresh_token: Optional[str] = None
    user: Optional[User] = None
    is_authenticated: bool = False
    is_loading: bool = False

    @property
    def role_name(self) -> str:
        return self.user.role_name if self.user else ""


@dataclass(frozen=True)
class LoginResult:
    token: str
    refresh_token: Optional[str]
    user: User


@dataclass(frozen=True)
class StoredCredentials:
    """What survives between process starts."""
    token: str
    refresh_token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None


# ── Evaluations ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class EvaluationRecord:
    """One evaluation row as delivered by the remote API. Never mutated."""
    id: int
    employee_name: str = ""
    evaluator_id: Optional[int] = None
    evaluator_name: str = ""
    period_id: Optional[int] = None
    period_name: str = ""
    status: str = ""
    due_date: Optional[str] = None
    weighted_score: Optional[float] = None
    total_score: Optional[float] = None
    employee_id: Optional[int] = None
    completed_at: Optional[str] = None
    department: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EvaluationRecord":
        employee = data.get("employee") if isinstance(data.get("employee"), dict) else {}
        evaluator = data.get("evaluator") if isinstance(data.get("evaluator"), dict) else {}
        period = data.get("period") if isinstance(data.get("period"), dict) else {}

        def _name(person: Dict[str, Any]) -> str:
            return f"{person.get('first_name', '')} {person.get('last_name', '')}".strip()

        return cls(
            id=int(data["id"]),
            employee_name=str(data.get("employee_name") or _name(employee)),
            evaluator_id=as_int(data.get("evaluator_id") or evaluator.get("id")),
            evaluator_name=str(data.get("evaluator_name") or _name(evaluator)),
            period_id=as_int(data.get("period_id") or period.get("id")),
            period_name=str(data.get("period_name") or period.get("name") or ""),
            status=str(data.get("status") or ""),
            due_date=data.get("due_date") or period.get("due_date"),
            weighted_score=_as_float(data.get("weighted_score")),
            total_score=_as_float(data.get("total_score")),
            employee_id=as_int(data.get("employee_id") or employee.get("id")),
            completed_at=data.get("completed_at"),
            department=str(data.get("department") or employee.get("department") or ""),
        )


@dataclass(frozen=True)
class FilterState:
    status: str = "all"
    search: str = ""
    evaluator_id: Optional[int] = None
    period_id: Optional[int] = None


@dataclass(frozen=True)
class SortState:
    column: str = "id"
    direction: str = "asc"   # "asc" or "desc"


@dataclass(frozen=True)
class StatusBucket:
    """One slice of the status distribution chart."""
    status: CanonicalStatus
    label: str
    color: str
    count: int


# ── Access control ───────────────────────────────────────────────────

@dataclass(frozen=True)
class RoleCapabilitySet:
    """Capabilities derived from a role string."""
    role: str
    can_access_dashboard: bool
    can_manage_employees: bool
    can_manage_evaluations: bool
    can_access_my_evaluations: bool
    is_admin_only: bool
    default_route: str = ""


@dataclass(frozen=True)
class RouteDecision:
    action: str                  # "render", "redirect" or "loading"
    target: Optional[str] = None
    screen: Optional[str] = None
    reason: str = ""


@dataclass
class DashboardView:
    """Everything the dashboard screen renders."""
    rows: list = field(default_factory=list)
    distribution: list = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)
    overdue_evaluators: list = field(default_factory=list)
    trend: Optional[int] = None
    trend_error: Optional[str] = None
    total_records: int = 0
