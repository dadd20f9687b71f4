"""Aggregate statistics over inspections and subtasks.

Archived inspections (deleted but kept for analytics) are counted here.
"""

from __future__ import annotations

from collections import Counter, OrderedDict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable

from inspectrack.models import Inspection, InventoryType, Subtask
from inspectrack.services.calendar import week_start


@dataclass
class AnalyticsStats:
    total_inspections: int = 0
    completed_inspections: int = 0
    pass_rate: float = 0.0
    fail_rate: float = 0.0
    completed_tasks: int = 0
    pending_tasks: int = 0
    top_failed_items: list[dict] = field(default_factory=list)
    inspections_by_type: list[dict] = field(default_factory=list)
    upcoming_inspections: list[dict] = field(default_factory=list)
    monthly_trend: list[dict] = field(default_factory=list)


def _months_back(day: date, months: int) -> date:
    y, m = day.year, day.month - months
    while m <= 0:
        m += 12
        y -= 1
    # Clamp to the month's last day (e.g. Aug 31 - 6 months)
    for d in (day.day, 30, 29, 28):
        try:
            return date(y, m, d)
        except ValueError:
            continue
    return date(y, m, 28)


def compute_stats(
    inspections: Iterable[Inspection],
    subtasks: Iterable[Subtask],
    inventory_types: Iterable[InventoryType],
    today: date,
    upcoming_days: int = 30,
    upcoming_weeks: int = 4,
    trend_months: int = 6,
    top_n: int = 5,
) -> AnalyticsStats:
    inspections = list(inspections)
    subtasks = list(subtasks)
    type_names = {t.id: t.name for t in inventory_types}

    stats = AnalyticsStats()
    stats.total_inspections = len(inspections)
    stats.completed_inspections = sum(1 for i in inspections if i.completed)

    passed = sum(1 for s in subtasks if s.status == "pass" or s.completed)
    failed = sum(1 for s in subtasks if s.status == "fail")
    total = len(subtasks)
    stats.pass_rate = (passed / total) * 100 if total else 0.0
    stats.fail_rate = (failed / total) * 100 if total else 0.0
    stats.completed_tasks = passed
    stats.pending_tasks = total - passed

    item_counts: Counter[str] = Counter()
    for s in subtasks:
        if s.status == "fail" and s.inventory_type_id:
            item_counts[s.inventory_type_id] += s.inventory_quantity or 1
    stats.top_failed_items = [
        {"name": type_names.get(type_id, "Unknown"), "count": count}
        for type_id, count in sorted(item_counts.items(), key=lambda kv: kv[1], reverse=True)[:top_n]
    ]

    by_type: OrderedDict[str, int] = OrderedDict()
    for insp in inspections:
        by_type[insp.type] = by_type.get(insp.type, 0) + 1
    stats.inspections_by_type = [{"type": t, "count": c} for t, c in by_type.items()]

    horizon = today + timedelta(days=upcoming_days)
    weeks: Counter[date] = Counter()
    for insp in inspections:
        if today <= insp.date <= horizon and not insp.completed:
            weeks[week_start(insp.date)] += 1
    stats.upcoming_inspections = [
        {"date": f"{wk.strftime('%b')} {wk.day}", "week_start": wk.isoformat(), "count": weeks[wk]}
        for wk in sorted(weeks)[:upcoming_weeks]
    ]

    cutoff = _months_back(today, trend_months)
    monthly: dict[tuple[int, int], dict[str, int]] = {}
    for insp in inspections:
        if insp.date < cutoff:
            continue
        bucket = monthly.setdefault((insp.date.year, insp.date.month), {"completed": 0, "pending": 0})
        bucket["completed" if insp.completed else "pending"] += 1
    stats.monthly_trend = [
        {"month": date(y, m, 1).strftime("%b %Y"), **counts}
        for (y, m), counts in sorted(monthly.items())
    ]
    return stats
