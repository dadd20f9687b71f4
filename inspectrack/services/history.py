"""Inspection history for a property/unit: how each recorded issue evolved."""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.models import Inspection, Profile, Subtask

BAD_STATUSES = ("bad", "fail")


@dataclass
class SubtaskHistory:
    id: str
    description: str
    room_name: str | None
    assigned_users: list[str]
    initial_status: str | None
    initial_completed: bool
    current_status: str | None
    current_completed: bool

    @property
    def status_changed(self) -> bool:
        return (self.initial_status, self.initial_completed) != (self.current_status, self.current_completed)


@dataclass
class HistoryEntry:
    id: str
    date: object
    time: str
    type: str
    property_name: str
    unit_name: str | None
    completed_by: str | None
    completed_by_name: str | None
    subtasks: list[SubtaskHistory] = field(default_factory=list)


def _issue_key(sub: Subtask) -> tuple[str, str, str]:
    return (sub.original_inspection_id, sub.room_name or "no-room", sub.description)


async def inspection_history(
    db: AsyncSession,
    inspection: Inspection,
    show_all_items: bool = False,
) -> list[HistoryEntry]:
    """Completed inspections at the same property and unit, newest first.

    Each entry lists the checklist items first recorded in that inspection
    (only those recorded during a template run) next to the latest status of
    any follow-up copy. Without show_all_items only problem items are kept.
    """
    stmt = select(Inspection).where(
        Inspection.completed == True,
        Inspection.archived == False,
        Inspection.property_id == inspection.property_id,
    )
    if inspection.unit_id:
        stmt = stmt.where(Inspection.unit_id == inspection.unit_id)
    else:
        stmt = stmt.where(Inspection.unit_id.is_(None))
    stmt = stmt.order_by(Inspection.date.desc(), Inspection.time.desc()).execution_options(populate_existing=True)
    inspections = list((await db.execute(stmt)).scalars().all())
    if not inspections:
        return []

    insp_ids = [i.id for i in inspections]
    subs = list((await db.execute(
        select(Subtask)
        .where(Subtask.original_inspection_id.in_(insp_ids))
        .order_by(Subtask.created_at, Subtask.id)
    )).scalars().all())

    latest: dict[tuple[str, str, str], Subtask] = {}
    for s in subs:
        latest[_issue_key(s)] = s  # ordered by created_at, last one wins

    completer_ids = {i.completed_by for i in inspections if i.completed_by}
    names: dict[str, str | None] = {}
    if completer_ids:
        rows = (await db.execute(
            select(Profile.id, Profile.full_name, Profile.email).where(Profile.id.in_(completer_ids))
        )).all()
        names = {r.id: r.full_name or r.email for r in rows}

    history = []
    for insp in inspections:
        entry = HistoryEntry(
            id=insp.id,
            date=insp.date,
            time=insp.time,
            type=insp.type,
            property_name=insp.property.name if insp.property else "",
            unit_name=insp.unit.name if insp.unit else None,
            completed_by=insp.completed_by,
            completed_by_name=names.get(insp.completed_by) if insp.completed_by else None,
        )
        for initial in subs:
            if initial.original_inspection_id != insp.id or initial.inspection_id != insp.id:
                continue
            if initial.inspection_run_id is None:
                continue
            if not show_all_items and initial.status not in BAD_STATUSES:
                continue
            current = latest.get(_issue_key(initial), initial)
            entry.subtasks.append(SubtaskHistory(
                id=initial.id,
                description=initial.description,
                room_name=initial.room_name,
                assigned_users=list(initial.assigned_users or []),
                initial_status=initial.status,
                initial_completed=bool(initial.completed),
                current_status=current.status,
                current_completed=bool(current.completed),
            ))
        history.append(entry)
    return history
