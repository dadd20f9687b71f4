"""Calendar grouping for the month and week views.

Weeks start on Sunday. "Today" is evaluated in the configured display
timezone, not the server's.
"""

from __future__ import annotations

import calendar as _cal
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Iterable
from zoneinfo import ZoneInfo

from inspectrack.config import get_settings
from inspectrack.models import Inspection

TYPE_COLORS = {
    "S8 - RFT": "inspection-s8-rft",
    "S8 - 1st Annual": "inspection-s8-annual",
    "S8 - Reinspection": "inspection-s8-reinspection",
    "S8 - Abatement Cure": "inspection-s8-abatement",
    "Rental License": "inspection-rental",
    "HUD": "inspection-hud",
}
DEFAULT_COLOR = "primary"


def type_color(inspection_type: str) -> str:
    return TYPE_COLORS.get(inspection_type, DEFAULT_COLOR)


def today(tz: str | None = None) -> date:
    tz = tz or get_settings().calendar.timezone
    return datetime.now(ZoneInfo(tz)).date()


def day_key(value: date | datetime, tz: str | None = None) -> str:
    """YYYY-MM-DD of a date, or of a timestamp as seen in the display timezone."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(ZoneInfo(tz or get_settings().calendar.timezone)).date()
    return value.isoformat()


def week_start(day: date) -> date:
    # date.weekday(): Monday=0 .. Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def week_days(anchor: date) -> list[date]:
    start = week_start(anchor)
    return [start + timedelta(days=i) for i in range(7)]


def month_grid(year: int, month: int) -> list[date | None]:
    """Days of the month, padded with leading None so day 1 sits under its weekday."""
    first = date(year, month, 1)
    lead = (first.weekday() + 1) % 7
    days_in_month = _cal.monthrange(year, month)[1]
    return [None] * lead + [date(year, month, d) for d in range(1, days_in_month + 1)]


def group_by_day(inspections: Iterable[Inspection]) -> dict[date, list[Inspection]]:
    grouped: dict[date, list[Inspection]] = defaultdict(list)
    for insp in inspections:
        grouped[insp.date].append(insp)
    for day in grouped:
        grouped[day].sort(key=lambda i: i.time)
    return dict(grouped)


def inspections_for_day(inspections: Iterable[Inspection], day: date | None) -> list[Inspection]:
    if day is None:
        return []
    return sorted((i for i in inspections if i.date == day), key=lambda i: i.time)


def build_month(year: int, month: int, inspections: list[Inspection], tz: str | None = None) -> dict:
    """Month view payload: weekday header plus one cell per grid slot."""
    by_day = group_by_day(inspections)
    now = today(tz)
    cells = []
    for day in month_grid(year, month):
        cells.append({
            "date": day,
            "is_today": day == now,
            "inspections": by_day.get(day, []) if day else [],
        })
    return {
        "year": year,
        "month": month,
        "title": date(year, month, 1).strftime("%B %Y"),
        "weekdays": ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"],
        "cells": cells,
    }


def build_week(anchor: date, inspections: list[Inspection], tz: str | None = None) -> dict:
    by_day = group_by_day(inspections)
    now = today(tz)
    days = week_days(anchor)
    return {
        "start": days[0],
        "end": days[-1],
        "title": f"{days[0].strftime('%b')} {days[0].day} - {days[-1].strftime('%b')} {days[-1].day}, {days[-1].year}",
        "days": [
            {"date": d, "weekday": d.strftime("%A"), "is_today": d == now, "inspections": by_day.get(d, [])}
            for d in days
        ],
    }
