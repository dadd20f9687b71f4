"""Floorplans shared by units across properties."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.db import crud
from inspectrack.db.engine import get_db
from inspectrack.dependencies import require_auth, require_editor
from inspectrack.services.auth import AuthContext
from inspectrack.schemas import FloorplanCreate, FloorplanRead

router = APIRouter(prefix="/api/floorplans", tags=["floorplans"])


async def get_or_create_floorplan(db: AsyncSession, name: str, created_by: str | None):
    existing = await crud.get_floorplan_by_name(db, name)
    if existing:
        return existing
    return await crud.create_floorplan(db, name, created_by=created_by)


@router.get("", response_model=list[FloorplanRead])
async def list_floorplans(
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await crud.list_floorplans(db)


@router.post("", response_model=FloorplanRead, status_code=201)
async def create_floorplan(
    body: FloorplanCreate,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    name = body.name.strip()
    if not name:
        raise HTTPException(400, "Floorplan name is required")
    if await crud.get_floorplan_by_name(db, name):
        raise HTTPException(409, "A floorplan with that name already exists")
    return await crud.create_floorplan(db, name, created_by=auth.user_id)


@router.delete("/{floorplan_id}")
async def delete_floorplan(
    floorplan_id: str,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    """Units on this floorplan keep existing without one."""
    fp = await crud.get_floorplan(db, floorplan_id)
    if not fp:
        raise HTTPException(404, "Floorplan not found")
    await crud.delete_floorplan(db, fp)
    return {"ok": True}
