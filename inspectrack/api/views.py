"""Read-only views: month/week calendar and the analytics dashboard."""

from __future__ import annotations

import calendar as _cal
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.config import get_settings
from inspectrack.db import crud
from inspectrack.db.engine import get_db
from inspectrack.dependencies import require_auth
from inspectrack.services import calendar
from inspectrack.services.analytics import compute_stats
from inspectrack.services.auth import AuthContext
from inspectrack.schemas import InspectionRead

router = APIRouter(prefix="/api", tags=["views"])


def _serialize(inspections) -> list[dict]:
    return [
        {**InspectionRead.model_validate(i).model_dump(mode="json"), "color": calendar.type_color(i.type)}
        for i in inspections
    ]


@router.get("/calendar")
async def month_view(
    year: int | None = Query(default=None, ge=1900, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    now = calendar.today()
    year = year or now.year
    month = month or now.month
    start = date(year, month, 1)
    end = date(year, month, _cal.monthrange(year, month)[1])
    view = calendar.build_month(year, month, await crud.list_inspections_in_range(db, start, end))
    for cell in view["cells"]:
        cell["date"] = cell["date"].isoformat() if cell["date"] else None
        cell["inspections"] = _serialize(cell["inspections"])
    return view


@router.get("/calendar/week")
async def week_view(
    day: date | None = None,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    anchor = day or calendar.today()
    days = calendar.week_days(anchor)
    view = calendar.build_week(anchor, await crud.list_inspections_in_range(db, days[0], days[-1]))
    view["start"] = view["start"].isoformat()
    view["end"] = view["end"].isoformat()
    for d in view["days"]:
        d["date"] = d["date"].isoformat()
        d["inspections"] = _serialize(d["inspections"])
    return view


@router.get("/calendar/day")
async def day_view(
    day: date,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    """Inspections listed in the day dialog, by time."""
    inspections = await crud.list_inspections_in_range(db, day, day)
    return _serialize(calendar.inspections_for_day(inspections, day))


@router.get("/analytics")
async def analytics(
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    cfg = get_settings().analytics
    stats = compute_stats(
        await crud.list_inspections(db, include_archived=True),
        await crud.list_all_subtasks(db),
        await crud.list_inventory_types(db),
        today=calendar.today(),
        upcoming_days=cfg.upcoming_days,
        upcoming_weeks=cfg.upcoming_weeks,
        trend_months=cfg.trend_months,
        top_n=cfg.top_failed_items,
    )
    return stats
