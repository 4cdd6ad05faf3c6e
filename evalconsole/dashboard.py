"""
Dashboard loader and view-model assembly.

The role decides which evaluation source is queried; the records then go
through normalisation -> filter/sort -> aggregation.
"""

import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional, Sequence

from evalconsole.aggregation import (
    completion_summary,
    overdue_evaluators,
    performance_trend,
    period_score_history,
    status_distribution,
)
from evalconsole.config import STATUS_DISPLAY
from evalconsole.errors import TrendBaselineError
from evalconsole.filters import filter_records, record_days_overdue, sort_records
from evalconsole.models import DashboardView, EvaluationRecord, FilterState, RoleCapabilitySet, SortState
from evalconsole.status import normalize_status

logger = logging.getLogger(__name__)


def load_records(
    client,
    caps: RoleCapabilitySet,
    period_id: Optional[int] = None,
    personal: bool = False,
) -> List[EvaluationRecord]:
    """
    Fetch the record set the role is allowed to see.
    Dashboard roles get the full (or period-scoped) set unless *personal* is
    requested; everyone else gets their own evaluations.
    """
    if caps.can_access_dashboard and not personal:
        if period_id is not None:
            return client.list_period_evaluations(period_id)
        return client.list_evaluations()

    mine = client.my_evaluations()
    merged, seen = [], set()
    for record in mine.get("as_evaluator", []) + mine.get("as_employee", []):
        if record.id in seen:
            continue
        seen.add(record.id)
        merged.append(record)
    if period_id is not None:
        merged = [r for r in merged if r.period_id == period_id]
    return merged


def row_view(record: EvaluationRecord, now: Any = None, display: Optional[Dict[str, Dict[str, str]]] = None) -> Dict[str, Any]:
    """Table row for one record, with the canonical status and derived columns."""
    display = STATUS_DISPLAY if display is None else display
    status = normalize_status(record.status)
    row = asdict(record)
    row["raw_status"] = record.status
    row["status"] = status.value
    row["status_label"] = display.get(status.value, {}).get("label", status.value)
    row["weighted_score"] = record.weighted_score if record.weighted_score is not None else 0.0
    row["days_overdue"] = record_days_overdue(record, now)
    return row


def build_dashboard(
    records: Sequence[EvaluationRecord],
    filter_state: Optional[FilterState] = None,
    sort_state: Optional[SortState] = None,
    now: Any = None,
    history: Optional[Sequence[float]] = None,
    display: Optional[Dict[str, Dict[str, str]]] = None,
) -> DashboardView:
    """
    Assemble the dashboard view.

    Table rows honour the filter and sort; the charts and totals describe
    the whole record set passed in.
    """
    filter_state = filter_state or FilterState()
    sort_state = sort_state or SortState()

    rows = sort_records(filter_records(records, filter_state), sort_state, now)
    if history is None:
        history = period_score_history(records)

    trend, trend_error = None, None
    try:
        trend = performance_trend(history)
    except TrendBaselineError as e:
        logger.info("Trend not shown: %s", e)
        trend_error = str(e)

    return DashboardView(
        rows=[row_view(r, now, display) for r in rows],
        distribution=status_distribution(records, display),
        summary=completion_summary(records),
        overdue_evaluators=overdue_evaluators(records, now),
        trend=trend,
        trend_error=trend_error,
        total_records=len(records),
    )


def dashboard_to_dict(view: DashboardView) -> Dict[str, Any]:
    """JSON-friendly form of a DashboardView."""
    return {
        "rows": view.rows,
        "distribution": [
            {"status": b.status.value, "label": b.label, "color": b.color, "count": b.count}
            for b in view.distribution
        ],
        "summary": view.summary,
        "overdue_evaluators": view.overdue_evaluators,
        "trend": view.trend,
        "trend_error": view.trend_error,
        "total_records": view.total_records,
        "row_count": len(view.rows),
    }
