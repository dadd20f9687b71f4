"""The assigned-tasks board: open checklist items grouped by inspection."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.models import Inspection, Subtask
from inspectrack.services.calendar import today as local_today


@dataclass
class TaskGroup:
    inspection: Inspection
    tasks: list[Subtask] = field(default_factory=list)


@dataclass
class TaskBoard:
    upcoming: list[TaskGroup] = field(default_factory=list)
    overdue: list[TaskGroup] = field(default_factory=list)


def _group(rows: list[tuple[Subtask, Inspection]]) -> list[TaskGroup]:
    groups: dict[str, TaskGroup] = {}
    for sub, insp in rows:
        groups.setdefault(insp.id, TaskGroup(inspection=insp)).tasks.append(sub)
    return list(groups.values())


async def assigned_tasks(
    db: AsyncSession,
    user_id: str,
    show_all: bool = False,
    today: date | None = None,
) -> TaskBoard:
    """Incomplete subtasks, by default only those assigned to ``user_id``.

    Ordered by inspection date. Inspections dated before today land in
    ``overdue``; today and later are ``upcoming``.
    """
    today = today or local_today()
    rows = (await db.execute(
        select(Subtask, Inspection)
        .join(Inspection, Subtask.inspection_id == Inspection.id)
        .where(Subtask.completed == False, Inspection.archived == False)
        .order_by(Subtask.created_at.desc())
    )).all()

    if not show_all:
        rows = [r for r in rows if user_id in (r[0].assigned_users or [])]
    # stable: newest task first within the same inspection date
    rows = sorted(rows, key=lambda r: r[1].date)

    return TaskBoard(
        upcoming=_group([r for r in rows if r[1].date >= today]),
        overdue=_group([r for r in rows if r[1].date < today]),
    )
