"""Connected-inspection lookups and the bulk complete/delete actions.

Inspections link through parent_inspection_id. For a primary inspection the
connected set is its children, its parent, and its siblings (other children of
the same parent). Only one level is followed in each direction.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.models import Inspection, InspectionRun, Subtask, SubtaskActivity

logger = logging.getLogger(__name__)


def connected_inspections(
    inspections: Iterable[Inspection],
    primary: Inspection,
    incomplete_only: bool = False,
) -> list[Inspection]:
    parent_id = primary.parent_inspection_id
    found = []
    for i in inspections:
        if i.id == primary.id:
            continue
        is_child = i.parent_inspection_id == primary.id
        is_parent = parent_id is not None and i.id == parent_id
        is_sibling = parent_id is not None and i.parent_inspection_id == parent_id
        if not (is_child or is_parent or is_sibling):
            continue
        if incomplete_only and i.completed:
            continue
        found.append(i)
    return found


async def find_connected(
    db: AsyncSession, primary: Inspection, incomplete_only: bool = False,
) -> list[Inspection]:
    """Database-backed connected set (archived rows excluded)."""
    conds = [Inspection.parent_inspection_id == primary.id]
    if primary.parent_inspection_id:
        conds.append(Inspection.id == primary.parent_inspection_id)
        conds.append(Inspection.parent_inspection_id == primary.parent_inspection_id)

    stmt = select(Inspection).where(Inspection.archived == False)
    stmt = stmt.where(or_(*conds)).order_by(Inspection.date, Inspection.time)
    rows = list((await db.execute(stmt)).scalars().all())
    return connected_inspections(rows, primary, incomplete_only=incomplete_only)


class ConnectedSelection:
    """Checkbox state of the complete/delete dialogs."""

    def __init__(self, primary_id: str, connected_ids: Sequence[str]):
        self.primary_id = primary_id
        self.connected_ids = [c for c in connected_ids if c != primary_id]
        self.selected: set[str] = set()

    def reset(self) -> None:
        self.selected = set()

    def toggle(self, inspection_id: str) -> None:
        if inspection_id not in self.connected_ids:
            raise KeyError(inspection_id)
        if inspection_id in self.selected:
            self.selected.discard(inspection_id)
        else:
            self.selected.add(inspection_id)

    @property
    def all_selected(self) -> bool:
        return len(self.selected) == len(self.connected_ids)

    def select_all(self) -> None:
        """Select everything, or clear when everything is already selected."""
        if self.all_selected:
            self.selected = set()
        else:
            self.selected = set(self.connected_ids)

    def confirm(self) -> list[str]:
        """Primary id first, then selected siblings in display order."""
        return [self.primary_id] + [c for c in self.connected_ids if c in self.selected]

    def confirm_label(self, verb: str) -> str:
        if self.selected:
            return f"{verb} {len(self.selected) + 1} Inspections"
        return f"{verb} Inspection"


async def complete_inspections(
    db: AsyncSession, inspection_ids: Sequence[str], completed_by: str | None = None,
) -> int:
    ids = list(dict.fromkeys(inspection_ids))
    if not ids:
        return 0
    res = await db.execute(
        update(Inspection)
        .where(Inspection.id.in_(ids))
        .values(completed=True, completed_by=completed_by)
        .execution_options(synchronize_session="fetch")
    )
    await db.commit()
    logger.info(f"Marked {res.rowcount} inspection(s) complete")
    return res.rowcount


async def toggle_inspection_complete(
    db: AsyncSession, inspection: Inspection, actor_id: str | None = None,
) -> Inspection:
    inspection.completed = not inspection.completed
    inspection.completed_by = actor_id if inspection.completed else None
    await db.commit()
    await db.refresh(inspection)
    return inspection


async def delete_inspections(
    db: AsyncSession, inspection_ids: Sequence[str], keep_for_analytics: bool,
) -> int:
    """Archive (keep_for_analytics) or permanently delete inspections.

    Permanent deletion removes subtasks that reference the inspections by
    either foreign key first, all in one transaction.
    """
    ids = list(dict.fromkeys(inspection_ids))
    if not ids:
        return 0

    if keep_for_analytics:
        res = await db.execute(
            update(Inspection)
            .where(Inspection.id.in_(ids), Inspection.archived == False)
            .values(archived=True)
            .execution_options(synchronize_session="fetch")
        )
        await db.commit()
        logger.info(f"Archived {res.rowcount} inspection(s) for analytics")
        return res.rowcount

    try:
        sub_ids = select(Subtask.id).where(
            Subtask.inspection_id.in_(ids) | Subtask.original_inspection_id.in_(ids)
        )
        await db.execute(delete(SubtaskActivity).where(SubtaskActivity.subtask_id.in_(sub_ids)))
        await db.execute(delete(Subtask).where(Subtask.inspection_id.in_(ids)))
        await db.execute(delete(Subtask).where(Subtask.original_inspection_id.in_(ids)))
        await db.execute(delete(InspectionRun).where(InspectionRun.inspection_id.in_(ids)))
        await db.execute(
            update(Inspection)
            .where(Inspection.parent_inspection_id.in_(ids), Inspection.id.not_in(ids))
            .values(parent_inspection_id=None)
            .execution_options(synchronize_session=False)
        )
        res = await db.execute(
            delete(Inspection).where(Inspection.id.in_(ids)).execution_options(synchronize_session=False)
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    db.expunge_all()
    logger.info(f"Deleted {res.rowcount} inspection(s)")
    return res.rowcount
