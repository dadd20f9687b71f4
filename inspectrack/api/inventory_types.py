"""Inventory types: the named things a checklist item can count."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.db import crud
from inspectrack.db.engine import get_db
from inspectrack.dependencies import require_auth, require_editor
from inspectrack.services.auth import AuthContext
from inspectrack.schemas import InventoryTypeCreate, InventoryTypeRead

router = APIRouter(prefix="/api/inventory-types", tags=["inventory-types"])


@router.get("", response_model=list[InventoryTypeRead])
async def list_inventory_types(
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await crud.list_inventory_types(db)


@router.post("", response_model=InventoryTypeRead, status_code=201)
async def create_inventory_type(
    body: InventoryTypeCreate,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    name = body.name.strip()
    if not name:
        raise HTTPException(400, "Name is required")
    if await crud.get_inventory_type_by_name(db, name):
        raise HTTPException(409, "An inventory type with that name already exists")
    return await crud.create_inventory_type(db, name, created_by=auth.user_id)


@router.delete("/{type_id}")
async def delete_inventory_type(
    type_id: str,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    it = await crud.get_inventory_type(db, type_id)
    if not it:
        raise HTTPException(404, "Inventory type not found")
    await crud.delete_inventory_type(db, it)
    return {"ok": True}
