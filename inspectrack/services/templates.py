"""Template application: turn a template's rooms/items into subtasks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.db import crud
from inspectrack.models import Subtask

logger = logging.getLogger(__name__)


class TemplateNotFound(Exception):
    pass


class TemplateTypeMismatch(ValueError):
    """The template is for a different inspection type than the target."""


def check_template_type(template, inspection) -> None:
    if template.type and template.type != inspection.type:
        raise TemplateTypeMismatch(
            f"Template '{template.name}' is for {template.type} inspections, not {inspection.type}"
        )


@dataclass
class TemplateApplyResult:
    template_id: str
    inspection_id: str
    rooms_total: int = 0
    rooms_applied: int = 0
    subtasks_created: int = 0
    failed_rooms: list[str] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.failed_rooms)


async def apply_template(
    db: AsyncSession,
    template_id: str,
    inspection_id: str,
    created_by: str | None = None,
) -> TemplateApplyResult:
    """Create one subtask per template item, room by room in order.

    A template typed for another kind of inspection is refused with
    TemplateTypeMismatch. A room whose items cannot be loaded or inserted is
    rolled back on its own and listed in failed_rooms; the other rooms still
    land.
    """
    template = await crud.get_template(db, template_id)
    if not template:
        raise TemplateNotFound(template_id)
    insp = await crud.get_inspection(db, inspection_id)
    if insp is not None:
        check_template_type(template, insp)

    # Plain tuples: a per-room rollback expires loaded ORM rows
    rooms = [(r.id, r.name) for r in await crud.list_template_rooms(db, template_id)]
    result = TemplateApplyResult(
        template_id=template_id, inspection_id=inspection_id, rooms_total=len(rooms),
    )

    for room_id, room_name in rooms:
        try:
            items = await crud.list_template_items(db, room_id)
        except SQLAlchemyError as e:
            logger.warning(f"Could not load items for room {room_name!r}: {e}")
            await db.rollback()
            result.failed_rooms.append(room_name)
            continue

        subtasks = [
            Subtask(
                inspection_id=inspection_id,
                original_inspection_id=inspection_id,
                description=item.description,
                room_name=room_name,
                inventory_type_id=item.inventory_type_id,
                inventory_quantity=item.inventory_quantity,
                vendor_type_id=item.vendor_type_id,
                status="pending",
                created_by=created_by,
            )
            for item in items
        ]
        if subtasks:
            try:
                db.add_all(subtasks)
                await db.commit()
            except SQLAlchemyError as e:
                logger.error(f"Failed to create subtasks for room {room_name!r}: {e}")
                await db.rollback()
                result.failed_rooms.append(room_name)
                continue

        result.rooms_applied += 1
        result.subtasks_created += len(subtasks)

    insp = await crud.get_inspection(db, inspection_id)
    if insp is not None and insp.inspection_template_id != template_id:
        await crud.update_inspection(db, insp, inspection_template_id=template_id)

    if result.partial:
        logger.warning(
            f"Template {template_id} applied partially to {inspection_id}: "
            f"{result.rooms_applied}/{result.rooms_total} rooms"
        )
    else:
        logger.info(f"Template {template_id} applied to {inspection_id}: {result.subtasks_created} subtasks")
    return result
