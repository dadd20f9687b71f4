"""Inspection scheduling, bulk complete/delete, follow-ups and history."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, File
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.db import crud
from inspectrack.db.engine import get_db
from inspectrack.dependencies import require_auth, require_editor
from inspectrack.services import linking
from inspectrack.services.attachments import save_attachment
from inspectrack.services.auth import AuthContext
from inspectrack.services.history import inspection_history
from inspectrack.services.runs import RunItem, submit_run
from inspectrack.services.subtasks import FollowUpDateError, SubtaskValidationError, create_follow_up
from inspectrack.services.templates import TemplateNotFound, TemplateTypeMismatch
from inspectrack.schemas import (
    BulkComplete, BulkDelete, BulkResult, FollowUpCreate, FollowUpRead,
    InspectionCreate, InspectionRead, InspectionRunRead, InspectionUpdate, RunResultRead, RunSubmit,
    SubtaskRead,
)

router = APIRouter(prefix="/api/inspections", tags=["inspections"])


async def _get_or_404(db: AsyncSession, inspection_id: str):
    insp = await crud.get_inspection(db, inspection_id)
    if not insp or insp.archived:
        raise HTTPException(404, "Inspection not found")
    return insp


@router.post("", response_model=InspectionRead, status_code=201)
async def create_inspection(
    body: InspectionCreate,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    if not await crud.get_property(db, body.property_id):
        raise HTTPException(404, "Property not found")
    if body.unit_id:
        unit = await crud.get_unit(db, body.unit_id)
        if not unit or unit.property_id != body.property_id:
            raise HTTPException(400, "Unit does not belong to this property")
    if body.parent_inspection_id and not await crud.get_inspection(db, body.parent_inspection_id):
        raise HTTPException(404, "Parent inspection not found")

    return await crud.create_inspection(
        db, body.property_id, body.type, body.date, body.time,
        unit_id=body.unit_id, duration=body.duration,
        parent_inspection_id=body.parent_inspection_id, created_by=auth.user_id,
    )


@router.get("", response_model=list[InspectionRead])
async def list_inspections(
    property_id: str | None = None,
    unit_id: str | None = None,
    completed: bool | None = None,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await crud.list_inspections(db, property_id=property_id, unit_id=unit_id, completed=completed)


@router.post("/complete", response_model=BulkResult)
async def complete_inspections(
    body: BulkComplete,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    """Mark the primary inspection and the chosen connected ones complete."""
    count = await linking.complete_inspections(db, body.ids, completed_by=auth.user_id)
    if count == 0:
        raise HTTPException(404, "No inspections updated")
    return BulkResult(count=count)


@router.post("/delete", response_model=BulkResult)
async def delete_inspections(
    body: BulkDelete,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    """Archive (keep_for_analytics) or permanently delete inspections."""
    count = await linking.delete_inspections(db, body.ids, body.keep_for_analytics)
    if count == 0:
        raise HTTPException(404, "Cannot delete this inspection")
    return BulkResult(count=count)


@router.get("/{inspection_id}", response_model=InspectionRead)
async def get_inspection(
    inspection_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await _get_or_404(db, inspection_id)


@router.patch("/{inspection_id}", response_model=InspectionRead)
async def update_inspection(
    inspection_id: str,
    body: InspectionUpdate,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    insp = await _get_or_404(db, inspection_id)
    updates = body.model_dump(exclude_unset=True)
    if updates.get("unit_id"):
        unit = await crud.get_unit(db, updates["unit_id"])
        if not unit or unit.property_id != insp.property_id:
            raise HTTPException(400, "Unit does not belong to this property")
    if updates:
        insp = await crud.update_inspection(db, insp, **updates)
    return insp


@router.post("/{inspection_id}/attachment", response_model=InspectionRead)
async def upload_inspection_attachment(
    inspection_id: str,
    file: UploadFile = File(...),
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    insp = await _get_or_404(db, inspection_id)
    url = await save_attachment(await file.read(), file.filename or "", auth.user_id)
    return await crud.update_inspection(db, insp, attachment_url=url)


@router.post("/{inspection_id}/toggle-complete", response_model=InspectionRead)
async def toggle_complete(
    inspection_id: str,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    insp = await _get_or_404(db, inspection_id)
    return await linking.toggle_inspection_complete(db, insp, auth.user_id)


@router.get("/{inspection_id}/connected", response_model=list[InspectionRead])
async def connected_inspections(
    inspection_id: str,
    incomplete_only: bool = Query(default=False),
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    """Parent, children and siblings offered by the complete/delete dialogs."""
    insp = await _get_or_404(db, inspection_id)
    return await linking.find_connected(db, insp, incomplete_only=incomplete_only)


@router.post("/{inspection_id}/follow-up", response_model=FollowUpRead, status_code=201)
async def follow_up(
    inspection_id: str,
    body: FollowUpCreate,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    parent = await _get_or_404(db, inspection_id)
    try:
        child, copied = await create_follow_up(db, parent, body.type, body.date, body.time, created_by=auth.user_id)
    except FollowUpDateError as e:
        raise HTTPException(400, str(e))
    return FollowUpRead(inspection=InspectionRead.model_validate(child), subtasks_copied=copied)


@router.post("/{inspection_id}/runs", response_model=RunResultRead, status_code=201)
async def start_inspection_run(
    inspection_id: str,
    body: RunSubmit,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    """Walk a template: unticked items become issues tied to the new run."""
    insp = await _get_or_404(db, inspection_id)
    if body.assignee_id and not await crud.get_profile(db, body.assignee_id):
        raise HTTPException(400, "Assignee not found")
    custom = [RunItem(**item.model_dump()) for item in body.custom_items]
    try:
        result = await submit_run(
            db, insp, body.template_id,
            passed_item_ids=body.passed_item_ids,
            notes=body.notes,
            custom_items=custom,
            assignee_id=body.assignee_id,
            actor_id=auth.user_id,
        )
    except TemplateNotFound:
        raise HTTPException(404, "Template not found")
    except (TemplateTypeMismatch, SubtaskValidationError) as e:
        raise HTTPException(400, str(e))
    return RunResultRead(
        run=InspectionRunRead.model_validate(result.run),
        items_total=result.items_total,
        items_passed=result.items_passed,
        issues_recorded=result.issues_recorded,
        issues=[SubtaskRead.model_validate(s) for s in result.issues],
    )


@router.get("/{inspection_id}/runs", response_model=list[InspectionRunRead])
async def list_inspection_runs(
    inspection_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await _get_or_404(db, inspection_id)
    return await crud.list_runs_for_inspection(db, inspection_id)


@router.get("/{inspection_id}/history")
async def history(
    inspection_id: str,
    show_all_items: bool = Query(default=False),
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    insp = await crud.get_inspection(db, inspection_id)
    if not insp:
        raise HTTPException(404, "Inspection not found")
    entries = await inspection_history(db, insp, show_all_items=show_all_items)
    return [
        {
            "id": e.id,
            "date": e.date.isoformat(),
            "time": e.time,
            "type": e.type,
            "property_name": e.property_name,
            "unit_name": e.unit_name,
            "completed_by": e.completed_by,
            "completed_by_name": e.completed_by_name,
            "subtasks": [
                {
                    "id": s.id,
                    "description": s.description,
                    "room_name": s.room_name,
                    "assigned_users": s.assigned_users,
                    "initial_status": s.initial_status,
                    "initial_completed": s.initial_completed,
                    "current_status": s.current_status,
                    "current_completed": s.current_completed,
                    "status_changed": s.status_changed,
                }
                for s in e.subtasks
            ],
        }
        for e in entries
    ]
