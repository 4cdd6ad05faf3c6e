"""
Chart-ready aggregations – status distribution, completion summary,
overdue backlog per evaluator and the performance trend figure.
"""

import math
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from evalconsole.config import STATUS_DISPLAY
from evalconsole.errors import TrendBaselineError
from evalconsole.filters import as_number, days_overdue, field_value, parse_timestamp
from evalconsole.models import CanonicalStatus, StatusBucket
from evalconsole.status import normalize_status


# ── Frame construction ───────────────────────────────────────────────

def records_frame(records: Sequence[Any], now: Any = None) -> pd.DataFrame:
    """One row per record with the normalised status and derived columns."""
    rows = []
    for r in records:
        status = normalize_status(field_value(r, "status"))
        score = field_value(r, "weighted_score")
        rows.append({
            "id": field_value(r, "id"),
            "status": status.value,
            "evaluator_id": field_value(r, "evaluator_id"),
            "evaluator_name": field_value(r, "evaluator_name") or "",
            "period_id": field_value(r, "period_id"),
            "period_name": field_value(r, "period_name") or "",
            "weighted_score": float(score) if score is not None else 0.0,
            "due": parse_timestamp(field_value(r, "due_date")),
            "days_overdue": (
                days_overdue(field_value(r, "due_date"), now)
                if status is CanonicalStatus.OVERDUE else 0
            ),
        })
    df = pd.DataFrame(
        rows,
        columns=[
            "id", "status", "evaluator_id", "evaluator_name", "period_id",
            "period_name", "weighted_score", "due", "days_overdue",
        ],
    )
    df["due"] = pd.to_datetime(df["due"], errors="coerce")
    return df


# ── Status distribution ──────────────────────────────────────────────

def status_distribution(records: Sequence[Any], display: Optional[Dict[str, Dict[str, str]]] = None) -> List[StatusBucket]:
    """
    Count records per canonical status.
    Only statuses that occur get a bucket, in order of first appearance.
    """
    display = STATUS_DISPLAY if display is None else display
    if not records:
        return []

    statuses = pd.Series([normalize_status(field_value(r, "status")).value for r in records])
    counts = statuses.groupby(statuses, sort=False).size()

    buckets = []
    for key, count in counts.items():
        info = display.get(key, {})
        buckets.append(StatusBucket(
            status=CanonicalStatus(key),
            label=info.get("label", key),
            color=info.get("color", ""),
            count=int(count),
        ))
    return buckets


# ── Performance trend ────────────────────────────────────────────────

def performance_trend(history: Sequence[Optional[float]]) -> int:
    """
    Percentage change between the two most recent scores (index 0 is latest).
    Returns 0 when fewer than two points exist; raises TrendBaselineError
    when the previous score is zero or not a finite number.
    """
    if len(history) < 2:
        return 0
    latest = as_number(history[0])
    previous = as_number(history[1])
    if previous == 0 or not math.isfinite(previous):
        raise TrendBaselineError("Cannot compute a trend against a zero baseline score.")
    change = (latest - previous) / previous * 100
    if not math.isfinite(change):
        return 0
    # Half-up rounding: -2.5 rounds to -2, 2.5 rounds to 3.
    return int(math.floor(change + 0.5))


def period_score_history(records: Sequence[Any]) -> List[float]:
    """Average weighted score of completed evaluations per period, most recent period first."""
    df = records_frame(records)
    df = df[df["status"] == CanonicalStatus.COMPLETED.value]
    if df.empty:
        return []

    per_period = (
        df.groupby(["period_id", "period_name"], dropna=False, sort=False)
        .agg(score=("weighted_score", "mean"), due=("due", "max"))
        .reset_index()
        .sort_values("due", ascending=False, na_position="last", kind="mergesort")
    )
    return [round(float(s), 2) for s in per_period["score"]]


# ── Completion summary ───────────────────────────────────────────────

def completion_summary(records: Sequence[Any]) -> Dict[str, Any]:
    """Totals per status, completion rate (%) and average score of completed evaluations."""
    df = records_frame(records)
    total = len(df)
    counts = df["status"].value_counts()

    def _count(status: CanonicalStatus) -> int:
        return int(counts.get(status.value, 0))

    completed = _count(CanonicalStatus.COMPLETED)
    completed_scores = df.loc[df["status"] == CanonicalStatus.COMPLETED.value, "weighted_score"]

    return {
        "total": total,
        "completed": completed,
        "pending": _count(CanonicalStatus.PENDING),
        "in_progress": _count(CanonicalStatus.IN_PROGRESS),
        "overdue": _count(CanonicalStatus.OVERDUE),
        "completion_rate": round(completed * 100.0 / total, 1) if total else 0.0,
        "average_score": round(float(completed_scores.mean()), 2) if completed else 0.0,
    }


# ── Overdue backlog ──────────────────────────────────────────────────

def overdue_evaluators(records: Sequence[Any], now: Any = None) -> List[Dict[str, Any]]:
    """Evaluators with overdue evaluations, largest backlog first."""
    df = records_frame(records, now)
    df = df[df["status"] == CanonicalStatus.OVERDUE.value]
    if df.empty:
        return []

    grouped = (
        df.groupby("evaluator_name", dropna=False, sort=False)
        .agg(
            overdue_count=("id", "size"),
            oldest_overdue=("due", "min"),
            max_days_overdue=("days_overdue", "max"),
        )
        .reset_index()
        .sort_values(["overdue_count", "evaluator_name"], ascending=[False, True], kind="mergesort")
    )

    out = []
    for row in grouped.itertuples(index=False):
        oldest = row.oldest_overdue
        out.append({
            "evaluator_name": row.evaluator_name,
            "overdue_count": int(row.overdue_count),
            "oldest_overdue": None if pd.isna(oldest) else oldest.date().isoformat(),
            "max_days_overdue": int(row.max_days_overdue),
        })
    return out
