"""Vendor types: who a kind of repair goes to by default."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.db import crud
from inspectrack.db.engine import get_db
from inspectrack.dependencies import require_auth, require_editor
from inspectrack.services.auth import AuthContext
from inspectrack.schemas import VendorTypeCreate, VendorTypeRead, VendorTypeUpdate

router = APIRouter(prefix="/api/vendor-types", tags=["vendor-types"])


async def _clean(db: AsyncSession, name: str, user_id: str | None, current_id: str | None = None):
    name = name.strip()
    if not name:
        raise HTTPException(400, "Please enter a type name")
    existing = await crud.get_vendor_type_by_name(db, name)
    if existing and existing.id != current_id:
        raise HTTPException(409, "A vendor type with that name already exists")
    user_id = user_id if user_id and user_id != "none" else None
    if user_id and not await crud.get_profile(db, user_id):
        raise HTTPException(400, "Assigned user not found")
    return name, user_id


@router.get("", response_model=list[VendorTypeRead])
async def list_vendor_types(
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await crud.list_vendor_types(db)


@router.post("", response_model=VendorTypeRead, status_code=201)
async def create_vendor_type(
    body: VendorTypeCreate,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    name, user_id = await _clean(db, body.name, body.default_assigned_user_id)
    return await crud.create_vendor_type(db, name, default_assigned_user_id=user_id, created_by=auth.user_id)


@router.patch("/{type_id}", response_model=VendorTypeRead)
async def update_vendor_type(
    type_id: str,
    body: VendorTypeUpdate,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    vt = await crud.get_vendor_type(db, type_id)
    if not vt:
        raise HTTPException(404, "Vendor type not found")
    name, user_id = await _clean(db, body.name, body.default_assigned_user_id, current_id=vt.id)
    return await crud.update_vendor_type(db, vt, name=name, default_assigned_user_id=user_id)


@router.delete("/{type_id}")
async def delete_vendor_type(
    type_id: str,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    vt = await crud.get_vendor_type(db, type_id)
    if not vt:
        raise HTTPException(404, "Vendor type not found")
    await crud.delete_vendor_type(db, vt)
    return {"ok": True}
