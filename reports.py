"""Aggregations shared by the client and admin dashboards.

Totals always come from the stored record; tiers always come from
scoring.recommendation_for, so every view shows the same numbers.
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from evaluation import EvaluationRecord
from identity import Guard
from rubric import GUARD_RUBRIC, RubricCategory
from scoring import Recommendation, average_points, format_points


@dataclass(frozen=True)
class GuardSummary:
    guard_id: str
    guard_name: str
    evaluation_count: int
    average_points: float
    best_total: Optional[float]
    worst_total: Optional[float]
    latest_recommendation: Optional[Recommendation]


@dataclass(frozen=True)
class MonthlyCount:
    key: str
    label: str
    count: int


def _guard_names(guards: Iterable[Guard]) -> Dict[str, str]:
    return {guard.guard_id: guard.name for guard in guards}


def history_rows(
    records: Sequence[EvaluationRecord],
    guards: Iterable[Guard],
    now: datetime,
    categories: Sequence[RubricCategory] = GUARD_RUBRIC,
) -> List[Dict[str, Any]]:
    """Flat table rows, newest first, with category columns in rubric order."""
    names = _guard_names(guards)
    rows: List[Dict[str, Any]] = []
    for record in sorted(records, key=lambda r: r.created_at, reverse=True):
        row: Dict[str, Any] = {
            "record_id": record.record_id,
            "guard_name": names.get(record.guard_id, record.guard_id),
            "guard_id": record.guard_id,
            "date": record.created_at.date().isoformat(),
        }
        for category in categories:
            row[category.id] = format_points(record.scores.get(category.id, 0))
        row["total_points"] = format_points(record.total_points)
        row["recommendation"] = record.recommendation.tier.value
        row["editable"] = record.is_editable(now)
        rows.append(row)
    return rows


def guard_summary(
    records: Iterable[EvaluationRecord],
    guard_id: str,
    guard_name: str = "",
) -> GuardSummary:
    own = sorted(
        (record for record in records if record.guard_id == guard_id),
        key=lambda r: r.created_at,
    )
    totals = [record.total_points for record in own]
    return GuardSummary(
        guard_id=guard_id,
        guard_name=guard_name or guard_id,
        evaluation_count=len(own),
        average_points=average_points(totals),
        best_total=min(totals) if totals else None,
        worst_total=max(totals) if totals else None,
        latest_recommendation=own[-1].recommendation if own else None,
    )


def top_performers(
    records: Iterable[EvaluationRecord],
    guards: Iterable[Guard],
    limit: int = 10,
) -> List[GuardSummary]:
    """Evaluated guards ranked by lowest average penalty points."""
    names = _guard_names(guards)
    by_guard: Dict[str, List[EvaluationRecord]] = defaultdict(list)
    for record in records:
        by_guard[record.guard_id].append(record)

    summaries = [
        guard_summary(guard_records, guard_id, names.get(guard_id, guard_id))
        for guard_id, guard_records in by_guard.items()
    ]
    summaries.sort(key=lambda s: (s.average_points, -s.evaluation_count, s.guard_id))
    return summaries[:limit]


def monthly_activity(
    records: Iterable[EvaluationRecord],
    now: datetime,
    months: int = 6,
) -> List[MonthlyCount]:
    """Evaluation counts for the last `months` calendar months, oldest first."""
    counts: Dict[str, int] = defaultdict(int)
    for record in records:
        counts[f"{record.created_at.year}-{record.created_at.month:02d}"] += 1

    result: List[MonthlyCount] = []
    for offset in range(months - 1, -1, -1):
        year, month = now.year, now.month - offset
        while month <= 0:
            month += 12
            year -= 1
        key = f"{year}-{month:02d}"
        result.append(MonthlyCount(key=key, label=calendar.month_abbr[month], count=counts.get(key, 0)))
    return result
