"""Cascading deletion of a property or unit and everything that hangs off it.

Delete order never violates a foreign key:

    subtasks (by inspection_id, then by original_inspection_id)
      -> inspection runs
      -> inspections
      -> units + template associations (property only)
      -> the target row

All steps share one transaction. A failure at any step rolls the whole
sequence back, so callers either see everything gone or nothing touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.models import (
    Inspection, InspectionRun, Property, Subtask, SubtaskActivity, TemplateProperty, Unit,
)
from inspectrack.services.auth import AuthContext

logger = logging.getLogger(__name__)

TARGET_TYPES = ("property", "unit")


class CascadeDeleteError(Exception):
    """Raised when a cascade delete cannot run or fails midway (after rollback)."""


@dataclass
class CascadeResult:
    target_type: str
    target_id: str
    deleted: dict[str, int] = field(default_factory=dict)

    def add(self, table: str, count: int) -> None:
        self.deleted[table] = self.deleted.get(table, 0) + (count or 0)


async def _inspection_ids(db: AsyncSession, column, target_id: str) -> list[str]:
    result = await db.execute(select(Inspection.id).where(column == target_id))
    return list(result.scalars().all())


async def _delete_inspections(db: AsyncSession, insp_ids: list[str], result: CascadeResult) -> None:
    """Delete subtasks (both FKs) and then the inspections themselves."""
    if not insp_ids:
        return

    sub_ids = (await db.execute(
        select(Subtask.id).where(
            Subtask.inspection_id.in_(insp_ids) | Subtask.original_inspection_id.in_(insp_ids)
        )
    )).scalars().all()
    if sub_ids:
        res = await db.execute(delete(SubtaskActivity).where(SubtaskActivity.subtask_id.in_(sub_ids)))
        result.add("subtask_activity", res.rowcount)

    res = await db.execute(delete(Subtask).where(Subtask.inspection_id.in_(insp_ids)))
    result.add("subtasks", res.rowcount)
    res = await db.execute(delete(Subtask).where(Subtask.original_inspection_id.in_(insp_ids)))
    result.add("subtasks", res.rowcount)
    res = await db.execute(delete(InspectionRun).where(InspectionRun.inspection_id.in_(insp_ids)))
    result.add("inspection_runs", res.rowcount)

    # Linked inspections outside the target keep their row but lose the parent pointer
    await db.execute(
        Inspection.__table__.update()
        .where(Inspection.parent_inspection_id.in_(insp_ids), Inspection.id.not_in(insp_ids))
        .values(parent_inspection_id=None)
    )
    res = await db.execute(delete(Inspection).where(Inspection.id.in_(insp_ids)))
    result.add("inspections", res.rowcount)


async def _delete_property(db: AsyncSession, property_id: str, result: CascadeResult) -> None:
    insp_ids = await _inspection_ids(db, Inspection.property_id, property_id)
    logger.info(f"cascade-delete property {property_id}: {len(insp_ids)} inspections")
    await _delete_inspections(db, insp_ids, result)

    res = await db.execute(delete(Unit).where(Unit.property_id == property_id))
    result.add("units", res.rowcount)
    res = await db.execute(delete(TemplateProperty).where(TemplateProperty.property_id == property_id))
    result.add("template_properties", res.rowcount)
    res = await db.execute(delete(Property).where(Property.id == property_id))
    result.add("properties", res.rowcount)


async def _delete_unit(db: AsyncSession, unit_id: str, result: CascadeResult) -> None:
    insp_ids = await _inspection_ids(db, Inspection.unit_id, unit_id)
    logger.info(f"cascade-delete unit {unit_id}: {len(insp_ids)} inspections")
    await _delete_inspections(db, insp_ids, result)

    res = await db.execute(delete(Unit).where(Unit.id == unit_id))
    result.add("units", res.rowcount)


def _check_owner(row, actor: AuthContext) -> None:
    if actor.is_admin:
        return
    if row.created_by != actor.user_id:
        raise CascadeDeleteError("Forbidden")


async def cascade_delete(
    db: AsyncSession, target_type: str, target_id: str, actor: AuthContext,
) -> CascadeResult:
    """Delete a property or unit with all dependent rows, all-or-nothing."""
    if target_type not in TARGET_TYPES:
        raise CascadeDeleteError("Unknown type")
    if not target_id:
        raise CascadeDeleteError("Invalid request body")

    model = Property if target_type == "property" else Unit
    row = await db.get(model, target_id)
    if row is None:
        raise CascadeDeleteError(f"{target_type.capitalize()} not found")
    _check_owner(row, actor)

    result = CascadeResult(target_type=target_type, target_id=target_id)
    try:
        if target_type == "property":
            await _delete_property(db, target_id, result)
        else:
            await _delete_unit(db, target_id, result)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"cascade-delete {target_type} {target_id} rolled back: {e}")
        raise CascadeDeleteError(str(e)) from e

    # Bulk deletes bypass the identity map
    db.expunge_all()
    logger.info(f"cascade-delete {target_type} {target_id} done: {result.deleted}")
    return result
