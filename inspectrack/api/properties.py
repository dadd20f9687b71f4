"""Properties and their units, including unit floorplans."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.api.floorplans import get_or_create_floorplan
from inspectrack.db import crud
from inspectrack.db.engine import get_db
from inspectrack.dependencies import require_auth, require_editor
from inspectrack.services.auth import AuthContext
from inspectrack.schemas import (
    PropertyCreate, PropertyRead, PropertyUpdate, UnitCreate, UnitRead, UnitUpdate,
)

router = APIRouter(prefix="/api/properties", tags=["properties"])


@router.post("", response_model=PropertyRead, status_code=201)
async def create_property(
    body: PropertyCreate,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    if not body.name.strip():
        raise HTTPException(400, "Property name is required")
    prop = await crud.create_property(db, body.name.strip(), body.address.strip(), created_by=auth.user_id)
    for unit_name in body.units:
        if unit_name.strip():
            await crud.create_unit(db, prop.id, unit_name.strip(), created_by=auth.user_id)
    await db.refresh(prop, ["units"])
    return prop


@router.get("", response_model=list[PropertyRead])
async def list_properties(
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await crud.list_properties(db)


@router.get("/{property_id}", response_model=PropertyRead)
async def get_property(
    property_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    prop = await crud.get_property(db, property_id)
    if not prop:
        raise HTTPException(404, "Property not found")
    return prop


@router.patch("/{property_id}", response_model=PropertyRead)
async def update_property(
    property_id: str,
    body: PropertyUpdate,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    prop = await crud.get_property(db, property_id)
    if not prop:
        raise HTTPException(404, "Property not found")
    updates = body.model_dump(exclude_none=True)
    if updates:
        prop = await crud.update_property(db, prop, **updates)
    return prop


# ── Units ────────────────────────────────────────────────

async def _resolve_floorplan(db: AsyncSession, body, auth: AuthContext) -> tuple[bool, str | None]:
    """(changed, floorplan_id). A new floorplan name wins over floorplan_id; "" or "none" clears."""
    new_name = (body.new_floorplan_name or "").strip()
    if new_name:
        fp = await get_or_create_floorplan(db, new_name, auth.user_id)
        return True, fp.id
    if body.floorplan_id is None:
        return False, None
    if body.floorplan_id in ("", "none"):
        return True, None
    if not await crud.get_floorplan(db, body.floorplan_id):
        raise HTTPException(404, "Floorplan not found")
    return True, body.floorplan_id


@router.get("/{property_id}/units", response_model=list[UnitRead])
async def list_units(
    property_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    if not await crud.get_property(db, property_id):
        raise HTTPException(404, "Property not found")
    return await crud.list_units_for_property(db, property_id)


@router.post("/{property_id}/units", response_model=UnitRead, status_code=201)
async def create_unit(
    property_id: str,
    body: UnitCreate,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    if not await crud.get_property(db, property_id):
        raise HTTPException(404, "Property not found")
    if not body.name.strip():
        raise HTTPException(400, "Unit name is required")
    _, floorplan_id = await _resolve_floorplan(db, body, auth)
    return await crud.create_unit(
        db, property_id, body.name.strip(), floorplan_id=floorplan_id, created_by=auth.user_id,
    )


@router.patch("/units/{unit_id}", response_model=UnitRead)
async def update_unit(
    unit_id: str,
    body: UnitUpdate,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    unit = await crud.get_unit(db, unit_id)
    if not unit:
        raise HTTPException(404, "Unit not found")
    updates = {}
    if body.name is not None:
        if not body.name.strip():
            raise HTTPException(400, "Unit name is required")
        updates["name"] = body.name.strip()
    changed, floorplan_id = await _resolve_floorplan(db, body, auth)
    if changed:
        updates["floorplan_id"] = floorplan_id
    if updates:
        unit = await crud.update_unit(db, unit, **updates)
    return unit
