"""Inspection runs: walking a template's checklist on site.

The inspector ticks off every item that passes. Only the items left
unticked become subtasks, marked ``bad`` and tied to the run, so the
history view can tell run findings apart from tasks added by hand.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.db import crud
from inspectrack.models import Inspection, InspectionRun, Subtask
from inspectrack.services.subtasks import SubtaskValidationError, default_assignees
from inspectrack.services.templates import TemplateNotFound, check_template_type

logger = logging.getLogger(__name__)

ISSUE_STATUS = "bad"


@dataclass
class RunItem:
    """A checklist line added on site, outside the template."""

    description: str
    room_name: str | None = None
    inventory_type_id: str | None = None
    inventory_quantity: int | None = None
    vendor_type_id: str | None = None
    passed: bool = False
    notes: str | None = None


@dataclass
class RunResult:
    run: InspectionRun
    items_total: int = 0
    items_passed: int = 0
    issues: list[Subtask] = field(default_factory=list)

    @property
    def issues_recorded(self) -> int:
        return len(self.issues)


def with_notes(description: str, note: str | None) -> str:
    note = (note or "").strip()
    return f"{description}\n\nNotes: {note}" if note else description


async def submit_run(
    db: AsyncSession,
    inspection: Inspection,
    template_id: str,
    passed_item_ids: set[str] | list[str] = (),
    notes: dict[str, str] | None = None,
    custom_items: list[RunItem] | None = None,
    assignee_id: str | None = None,
    actor_id: str | None = None,
) -> RunResult:
    """Record a finished walk through a template in one transaction.

    ``notes`` is keyed by template item id. Custom items carry their own
    passed flag and notes. Every issue goes to ``assignee_id`` when given,
    otherwise to its vendor type's default assignee.
    """
    template = await crud.get_template(db, template_id)
    if not template:
        raise TemplateNotFound(template_id)
    check_template_type(template, inspection)

    passed = set(passed_item_ids)
    notes = notes or {}
    custom_items = custom_items or []
    for extra in custom_items:
        extra.description = (extra.description or "").strip()
        if not extra.description:
            raise SubtaskValidationError("Please enter an item description")

    now = datetime.now(timezone.utc)
    run = InspectionRun(
        inspection_id=inspection.id,
        template_id=template.id,
        started_by=actor_id,
        started_at=now,
        completed_at=now,
        completed_by=actor_id,
    )
    result = RunResult(run=run)
    assigned = [assignee_id] if assignee_id else None

    try:
        db.add(run)
        await db.flush()

        lines = []
        for room in await crud.list_template_rooms(db, template.id):
            for item in await crud.list_template_items(db, room.id):
                lines.append((item.id, room.name, item, notes.get(item.id)))
        for extra in custom_items:
            lines.append((None, extra.room_name, extra, extra.notes))

        for item_id, room_name, item, note in lines:
            result.items_total += 1
            ok = item.passed if item_id is None else item_id in passed
            if ok:
                result.items_passed += 1
                continue
            sub = Subtask(
                inspection_id=inspection.id,
                original_inspection_id=inspection.id,
                inspection_run_id=run.id,
                description=with_notes(item.description, note),
                room_name=room_name,
                inventory_type_id=item.inventory_type_id,
                inventory_quantity=item.inventory_quantity,
                vendor_type_id=item.vendor_type_id,
                assigned_users=await default_assignees(db, item.vendor_type_id, assigned),
                status=ISSUE_STATUS,
                created_by=actor_id,
            )
            db.add(sub)
            result.issues.append(sub)

        inspection.inspection_template_id = template.id
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Run on inspection {inspection.id} rolled back: {e}")
        raise

    await db.refresh(run)
    logger.info(
        f"Run {run.id} on {inspection.id}: {result.issues_recorded} issues, "
        f"{result.items_passed}/{result.items_total} passed"
    )
    return result
