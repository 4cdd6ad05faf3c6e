"""
Evaluation filter / sort engine and the derived "days overdue" column.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Iterable, List, Optional

from evalconsole.config import DEFAULT_SORT_COLUMN, DEFAULT_STATUS_FILTER
from evalconsole.models import CanonicalStatus, EvaluationRecord, FilterState, SortState, as_int
from evalconsole.status import normalize_status

ALL_STATUSES = "all"
DAYS_OVERDUE = "days_overdue"
SCORE_COLUMNS = {"weighted_score", "total_score"}
SORT_DIRECTIONS = {"asc", "desc"}


# ── Helpers ──────────────────────────────────────────────────────────

def field_value(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Coerce a datetime/date/ISO string to a naive UTC datetime (None if unparseable)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def as_number(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


# ── Derived fields ───────────────────────────────────────────────────

def days_overdue(due_date: Any, now: Any = None) -> int:
    """Whole days elapsed since *due_date*, never negative."""
    due = parse_timestamp(due_date)
    if due is None:
        return 0
    current = parse_timestamp(now) if now is not None else parse_timestamp(datetime.now(timezone.utc))
    if current is None:
        return 0
    elapsed = (current - due).total_seconds() // 86400
    return max(0, int(elapsed))


def record_days_overdue(record: Any, now: Any = None) -> int:
    """days_overdue for records whose status is overdue, 0 for everything else."""
    if normalize_status(field_value(record, "status")) is not CanonicalStatus.OVERDUE:
        return 0
    return days_overdue(field_value(record, "due_date"), now)


# ── Filtering ────────────────────────────────────────────────────────

def filter_records(records: Iterable[EvaluationRecord], state: FilterState) -> List[EvaluationRecord]:
    """
    Keep records matching every active criterion of *state*.
    Period scoping is not applied here; callers pick the period-scoped source.
    """
    status = state.status.value if isinstance(state.status, CanonicalStatus) else str(state.status or ALL_STATUSES)
    search = (state.search or "").lower()

    out = []
    for record in records:
        if status != ALL_STATUSES and normalize_status(field_value(record, "status")).value != status:
            continue
        if search and search not in str(field_value(record, "employee_name") or "").lower():
            continue
        if state.evaluator_id is not None and field_value(record, "evaluator_id") != state.evaluator_id:
            continue
        out.append(record)
    return out


# ── Sorting ──────────────────────────────────────────────────────────

def sort_key(column: str, now: Any = None):
    """Return the key function used to order records by *column*."""
    if column == DAYS_OVERDUE:
        return lambda r: record_days_overdue(r, now)
    if column in SCORE_COLUMNS:
        return lambda r: as_number(field_value(r, column))
    if column == "status":
        return lambda r: normalize_status(field_value(r, "status")).value

    def _text(r):
        value = field_value(r, column)
        if isinstance(value, CanonicalStatus):
            return value.value
        return "" if value is None else str(value)
    return _text


def sort_records(records: Iterable[EvaluationRecord], state: SortState, now: Any = None) -> List[EvaluationRecord]:
    """Stable sort returning a new list; the input collection is left untouched."""
    # sorted() keeps ties in input order for reverse=True as well.
    return sorted(list(records), key=sort_key(state.column, now), reverse=state.direction == "desc")


# ── Parsing UI / query-string state ──────────────────────────────────

def parse_filter_state(raw: Optional[dict]) -> FilterState:
    """Build a FilterState from loosely typed input, dropping values that do not parse."""
    raw = raw or {}
    status = str(raw.get("status") or DEFAULT_STATUS_FILTER).strip().lower()
    if status not in {s.value for s in CanonicalStatus}:
        status = ALL_STATUSES
    return FilterState(
        status=status,
        search=(raw.get("search") or "").strip(),
        evaluator_id=as_int(raw.get("evaluator_id")),
        period_id=as_int(raw.get("period_id")),
    )


def parse_sort_state(raw: Optional[dict]) -> SortState:
    raw = raw or {}
    column = str(raw.get("sort") or raw.get("column") or DEFAULT_SORT_COLUMN).strip()
    direction = str(raw.get("direction") or "asc").strip().lower()
    if direction not in SORT_DIRECTIONS:
        direction = "asc"
    return SortState(column=column or DEFAULT_SORT_COLUMN, direction=direction)
