"""Room library: reusable rooms with default items that templates copy from."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.db import crud
from inspectrack.db.engine import get_db
from inspectrack.dependencies import require_auth, require_editor
from inspectrack.services.auth import AuthContext
from inspectrack.schemas import RoomTemplateCreate, RoomTemplateItemRead, RoomTemplateRead, TemplateItemCreate

router = APIRouter(prefix="/api/room-templates", tags=["room-templates"])


async def _get_or_404(db: AsyncSession, room_template_id: str):
    rt = await crud.get_room_template(db, room_template_id)
    if not rt:
        raise HTTPException(404, "Room template not found")
    return rt


@router.get("", response_model=list[RoomTemplateRead])
async def list_room_templates(
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await crud.list_room_templates(db)


@router.post("", response_model=RoomTemplateRead, status_code=201)
async def create_room_template(
    body: RoomTemplateCreate,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    name = body.name.strip()
    if not name:
        raise HTTPException(400, "Please enter a room name")
    if await crud.get_room_template_by_name(db, name):
        raise HTTPException(409, "A room template with that name already exists")
    rt = await crud.create_room_template(db, name, created_by=auth.user_id)
    for i, item in enumerate(body.items):
        if item.description.strip():
            await crud.create_room_template_item(
                db, rt.id, item.description.strip(),
                item.order_index if item.order_index is not None else i,
                inventory_type_id=item.inventory_type_id,
                inventory_quantity=item.inventory_quantity,
                vendor_type_id=item.vendor_type_id,
            )
    return await crud.get_room_template(db, rt.id)


@router.get("/{room_template_id}", response_model=RoomTemplateRead)
async def get_room_template(
    room_template_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await _get_or_404(db, room_template_id)


@router.delete("/{room_template_id}")
async def delete_room_template(
    room_template_id: str,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    """Rooms already copied into templates are left alone."""
    rt = await _get_or_404(db, room_template_id)
    await crud.delete_room_template(db, rt)
    return {"ok": True}


@router.post("/{room_template_id}/items", response_model=RoomTemplateItemRead, status_code=201)
async def add_item(
    room_template_id: str,
    body: TemplateItemCreate,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    await _get_or_404(db, room_template_id)
    description = body.description.strip()
    if not description:
        raise HTTPException(400, "Item description is required")
    return await crud.create_room_template_item(
        db, room_template_id, description, body.order_index,
        inventory_type_id=body.inventory_type_id,
        inventory_quantity=body.inventory_quantity,
        vendor_type_id=body.vendor_type_id,
    )


@router.delete("/items/{item_id}")
async def delete_item(
    item_id: str,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    item = await crud.get_room_template_item(db, item_id)
    if not item:
        raise HTTPException(404, "Item not found")
    await crud.delete_room_template_item(db, item)
    return {"ok": True}
