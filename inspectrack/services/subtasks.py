"""Subtask edits, failure marking, and follow-up inspections.

Copies of a subtask carried into follow-up inspections share its
original_inspection_id. Edits to the description or inventory fields are
pushed to every copy with the same lineage and previous description.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.db import crud
from inspectrack.models import Inspection, Subtask, SubtaskActivity

logger = logging.getLogger(__name__)

_SYNCED_FIELDS = ("description", "inventory_type_id", "inventory_quantity")


class SubtaskValidationError(ValueError):
    pass


class FollowUpDateError(ValueError):
    pass


def normalize_edit(
    description: str,
    assigned_users: list[str] | None,
    inventory_quantity: int | None,
    inventory_type_id: str | None,
    vendor_type_id: str | None = None,
) -> dict:
    """Apply the edit dialog's field rules. Raises on a blank description."""
    description = (description or "").strip()
    if not description:
        raise SubtaskValidationError("Please enter a description")
    return {
        "description": description,
        "assigned_users": list(assigned_users) if assigned_users else None,
        "inventory_quantity": inventory_quantity if inventory_quantity and inventory_quantity > 0 else None,
        "inventory_type_id": inventory_type_id if inventory_type_id and inventory_type_id != "none" else None,
        "vendor_type_id": vendor_type_id if vendor_type_id and vendor_type_id != "none" else None,
    }


def parse_quantity(raw) -> int:
    """Positive integer or SubtaskValidationError."""
    try:
        qty = int(str(raw).strip())
    except (TypeError, ValueError):
        raise SubtaskValidationError("Quantity must be a positive whole number")
    if qty <= 0:
        raise SubtaskValidationError("Quantity must be a positive whole number")
    return qty


async def default_assignees(
    db: AsyncSession, vendor_type_id: str | None, assigned_users: list[str] | None,
) -> list[str] | None:
    """The vendor type's default assignee when nobody was picked."""
    if assigned_users or not vendor_type_id:
        return assigned_users
    vt = await crud.get_vendor_type(db, vendor_type_id)
    if vt is not None and vt.default_assigned_user_id:
        return [vt.default_assigned_user_id]
    return assigned_users


async def edit_subtask(db: AsyncSession, sub: Subtask, **fields) -> Subtask:
    """Update a subtask and keep its linked copies in sync."""
    previous_description = sub.description
    synced = {k: fields[k] for k in _SYNCED_FIELDS if k in fields}

    for k, v in fields.items():
        setattr(sub, k, v)

    if synced:
        res = await db.execute(
            update(Subtask)
            .where(
                Subtask.original_inspection_id == sub.original_inspection_id,
                Subtask.description == previous_description,
                Subtask.id != sub.id,
            )
            .values(**synced)
            .execution_options(synchronize_session="fetch")
        )
        if res.rowcount:
            logger.info(f"Synced edit of subtask {sub.id} to {res.rowcount} linked copies")

    await db.commit()
    await db.refresh(sub)
    return sub


async def mark_failed(
    db: AsyncSession, sub: Subtask, notes: str, assignee_id: str, actor_id: str,
) -> Subtask:
    notes = (notes or "").strip()
    if not notes:
        raise SubtaskValidationError("Please enter notes explaining the failure")
    if not assignee_id:
        raise SubtaskValidationError("Please assign a user to handle this failure")

    old_status = sub.status
    sub.status = "fail"
    sub.status_changed_by = actor_id
    sub.status_changed_at = datetime.now(timezone.utc)
    sub.assigned_users = [assignee_id]
    db.add_all([
        SubtaskActivity(
            subtask_id=sub.id, activity_type="status_changed",
            old_value=old_status, new_value="fail", created_by=actor_id,
        ),
        SubtaskActivity(subtask_id=sub.id, activity_type="note_added", notes=notes, created_by=actor_id),
    ])
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise
    await db.refresh(sub)
    return sub


async def toggle_subtask_complete(db: AsyncSession, sub: Subtask, actor_id: str) -> Subtask:
    sub.completed = not sub.completed
    sub.completed_at = datetime.now(timezone.utc) if sub.completed else None
    sub.completed_by = actor_id if sub.completed else None
    await db.commit()
    await db.refresh(sub)
    return sub


# ── Follow-up inspections ────────────────────────────────

async def subtasks_in_chain(db: AsyncSession, inspection_id: str) -> list[Subtask]:
    """Subtasks of an inspection and all of its ancestors.

    Duplicates by (original_inspection_id, description) collapse. Each key
    keeps the position of its first sighting and the values of its last one,
    which is the copy from the oldest ancestor.
    """
    collected: list[Subtask] = []
    seen_inspections: set[str] = set()
    current: str | None = inspection_id
    while current and current not in seen_inspections:
        seen_inspections.add(current)
        collected.extend(await crud.list_subtasks_for_inspection(db, current))
        parent = (await db.execute(
            select(Inspection.parent_inspection_id).where(Inspection.id == current)
        )).scalar_one_or_none()
        current = parent

    unique: dict[tuple[str, str], Subtask] = {}
    for sub in collected:
        unique[(sub.original_inspection_id, sub.description)] = sub
    return list(unique.values())


async def create_follow_up(
    db: AsyncSession,
    parent: Inspection,
    type: str,
    date,
    time: str,
    created_by: str | None = None,
) -> tuple[Inspection, int]:
    """New child inspection inheriting every subtask of the parent chain, reset to pending."""
    if date < parent.date:
        raise FollowUpDateError("Follow-up inspection date cannot be before the initial inspection date")
    child = Inspection(
        property_id=parent.property_id,
        unit_id=parent.unit_id,
        type=type,
        date=date,
        time=time,
        parent_inspection_id=parent.id,
        created_by=created_by,
    )
    db.add(child)
    await db.flush()

    inherited = await subtasks_in_chain(db, parent.id)
    db.add_all([
        Subtask(
            inspection_id=child.id,
            original_inspection_id=s.original_inspection_id,
            description=s.description,
            room_name=s.room_name,
            inventory_type_id=s.inventory_type_id,
            vendor_type_id=s.vendor_type_id,
            inventory_quantity=s.inventory_quantity or 0,
            assigned_users=s.assigned_users,
            attachment_url=s.attachment_url,
            status="pending",
            completed=False,
            created_by=s.created_by,
        )
        for s in inherited
    ])
    await db.commit()
    await db.refresh(child)
    logger.info(f"Follow-up {child.id} created from {parent.id} with {len(inherited)} subtasks")
    return child, len(inherited)
