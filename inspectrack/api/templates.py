"""Inspection templates: rooms, items, property links, and applying to an inspection."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.db import crud
from inspectrack.db.engine import get_db
from inspectrack.dependencies import require_auth, require_editor
from inspectrack.services.auth import AuthContext
from inspectrack.services.templates import TemplateNotFound, TemplateTypeMismatch, apply_template
from inspectrack.schemas import (
    TemplateApply, TemplateApplyRead, TemplateCreate, TemplateItemCreate, TemplateItemRead,
    TemplateRead, TemplateRoomCreate, TemplateRoomRead, TemplateUpdate,
)

router = APIRouter(prefix="/api", tags=["templates"])


async def _get_or_404(db: AsyncSession, template_id: str):
    tpl = await crud.get_template(db, template_id)
    if not tpl:
        raise HTTPException(404, "Template not found")
    return tpl


async def _resolve_room(db: AsyncSession, body: TemplateRoomCreate) -> tuple[str, list]:
    """Room name and items, filled in from the room library when one is referenced."""
    name = body.name.strip()
    items = list(body.items)
    if body.room_template_id:
        library = await crud.get_room_template(db, body.room_template_id)
        if not library:
            raise HTTPException(404, "Room template not found")
        name = name or library.name
        items = items or list(library.items)
    if not name:
        raise HTTPException(400, "Room name is required")
    return name, items


async def _add_room(db: AsyncSession, template_id: str, body: TemplateRoomCreate, name: str, items: list):
    room = await crud.create_template_room(
        db, template_id, name, body.order_index, room_template_id=body.room_template_id,
    )
    for i, item in enumerate(items):
        await crud.create_template_item(
            db, room.id, item.description.strip(),
            item.order_index if item.order_index is not None else i,
            inventory_type_id=item.inventory_type_id,
            inventory_quantity=item.inventory_quantity,
            vendor_type_id=item.vendor_type_id,
        )
    return room


@router.post("/templates", response_model=TemplateRead, status_code=201)
async def create_template(
    body: TemplateCreate,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    name = body.name.strip()
    if not name:
        raise HTTPException(400, "Template name is required")
    # Check every reference before writing anything
    for property_id in body.property_ids:
        if not await crud.get_property(db, property_id):
            raise HTTPException(404, f"Property {property_id} not found")
    rooms = [(room, *await _resolve_room(db, room)) for room in body.rooms]

    tpl = await crud.create_template(db, name, body.type, created_by=auth.user_id)
    for property_id in body.property_ids:
        await crud.link_template_property(db, tpl.id, property_id)
    for room, room_name, items in rooms:
        await _add_room(db, tpl.id, room, room_name, items)
    return await crud.get_template(db, tpl.id)


@router.get("/templates", response_model=list[TemplateRead])
async def list_templates(
    type: str | None = None,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await crud.list_templates(db, type=type)


@router.get("/templates/{template_id}", response_model=TemplateRead)
async def get_template(
    template_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await _get_or_404(db, template_id)


@router.patch("/templates/{template_id}", response_model=TemplateRead)
async def update_template(
    template_id: str,
    body: TemplateUpdate,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    tpl = await _get_or_404(db, template_id)
    updates = body.model_dump(exclude_unset=True)
    if updates:
        await crud.update_template(db, tpl, **updates)
    return await crud.get_template(db, template_id)


@router.delete("/templates/{template_id}")
async def delete_template(
    template_id: str,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    tpl = await _get_or_404(db, template_id)
    await crud.delete_template(db, tpl)
    return {"ok": True}


@router.get("/templates/{template_id}/properties", response_model=list[str])
async def template_properties(
    template_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await _get_or_404(db, template_id)
    return await crud.list_template_property_ids(db, template_id)


@router.post("/templates/{template_id}/properties/{property_id}", status_code=201)
async def link_property(
    template_id: str,
    property_id: str,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    await _get_or_404(db, template_id)
    if not await crud.get_property(db, property_id):
        raise HTTPException(404, "Property not found")
    await crud.link_template_property(db, template_id, property_id)
    return {"ok": True}


@router.post("/templates/{template_id}/rooms", response_model=TemplateRoomRead, status_code=201)
async def add_room(
    template_id: str,
    body: TemplateRoomCreate,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    await _get_or_404(db, template_id)
    name, items = await _resolve_room(db, body)
    room = await _add_room(db, template_id, body, name, items)
    await db.refresh(room, ["items"])
    return room


@router.delete("/templates/rooms/{room_id}")
async def delete_room(
    room_id: str,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    room = await crud.get_template_room(db, room_id)
    if not room:
        raise HTTPException(404, "Room not found")
    await crud.delete_template_room(db, room)
    return {"ok": True}


@router.post("/templates/rooms/{room_id}/items", response_model=TemplateItemRead, status_code=201)
async def add_item(
    room_id: str,
    body: TemplateItemCreate,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    if not await crud.get_template_room(db, room_id):
        raise HTTPException(404, "Room not found")
    description = body.description.strip()
    if not description:
        raise HTTPException(400, "Item description is required")
    return await crud.create_template_item(
        db, room_id, description, body.order_index,
        inventory_type_id=body.inventory_type_id,
        inventory_quantity=body.inventory_quantity,
        vendor_type_id=body.vendor_type_id,
    )


@router.delete("/templates/items/{item_id}")
async def delete_item(
    item_id: str,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    item = await crud.get_template_item(db, item_id)
    if not item:
        raise HTTPException(404, "Item not found")
    await crud.delete_template_item(db, item)
    return {"ok": True}


@router.post("/inspections/{inspection_id}/apply-template", response_model=TemplateApplyRead)
async def apply_to_inspection(
    inspection_id: str,
    body: TemplateApply,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    """Create subtasks from every room and item of a template.

    A template made for another inspection type is refused with 400. Rooms
    that fail are reported in failed_rooms with ok=false and partial=true;
    rooms that succeeded stay applied.
    """
    insp = await crud.get_inspection(db, inspection_id)
    if not insp or insp.archived:
        raise HTTPException(404, "Inspection not found")
    try:
        result = await apply_template(db, body.template_id, inspection_id, created_by=auth.user_id)
    except TemplateNotFound:
        raise HTTPException(404, "Template not found")
    except TemplateTypeMismatch as e:
        raise HTTPException(400, str(e))
    return TemplateApplyRead(
        ok=not result.partial,
        partial=result.partial,
        rooms_total=result.rooms_total,
        rooms_applied=result.rooms_applied,
        subtasks_created=result.subtasks_created,
        failed_rooms=result.failed_rooms,
    )
