"""Checklist items: add, edit, fail with notes, quantity, completion, activity."""

from __future__ import annotations

import json

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.db import crud
from inspectrack.db.engine import get_db
from inspectrack.dependencies import require_auth, require_editor
from inspectrack.services import subtasks as subtask_service
from inspectrack.services.attachments import save_attachment
from inspectrack.services.auth import AuthContext
from inspectrack.services.subtasks import SubtaskValidationError
from inspectrack.schemas import (
    SubtaskActivityRead, SubtaskFail, SubtaskQuantity, SubtaskRead, SubtaskUpdate,
)

router = APIRouter(prefix="/api", tags=["subtasks"])


async def _get_or_404(db: AsyncSession, subtask_id: str):
    sub = await crud.get_subtask(db, subtask_id)
    if not sub:
        raise HTTPException(404, "Subtask not found")
    return sub


@router.get("/inspections/{inspection_id}/subtasks", response_model=list[SubtaskRead])
async def list_subtasks(
    inspection_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    if not await crud.get_inspection(db, inspection_id):
        raise HTTPException(404, "Inspection not found")
    return await crud.list_subtasks_for_inspection(db, inspection_id)


@router.post("/inspections/{inspection_id}/subtasks", response_model=SubtaskRead, status_code=201)
async def add_subtask(
    inspection_id: str,
    description: str = Form(...),
    room_name: str | None = Form(None),
    assigned_users: str | None = Form(None),
    inventory_type_id: str | None = Form(None),
    inventory_quantity: int | None = Form(None),
    vendor_type_id: str | None = Form(None),
    file: UploadFile | None = File(None),
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    """Add a checklist item, optionally with an attachment.

    assigned_users is a JSON array or a comma-separated list of profile ids.
    With nobody assigned, a vendor type's default assignee takes the task.
    """
    if not await crud.get_inspection(db, inspection_id):
        raise HTTPException(404, "Inspection not found")

    users: list[str] | None = None
    if assigned_users:
        try:
            users = json.loads(assigned_users)
        except json.JSONDecodeError:
            users = [u.strip() for u in assigned_users.split(",") if u.strip()]
        if not isinstance(users, list):
            users = [str(users)]

    try:
        fields = subtask_service.normalize_edit(
            description, users, inventory_quantity, inventory_type_id, vendor_type_id,
        )
    except SubtaskValidationError as e:
        raise HTTPException(400, str(e))
    fields["assigned_users"] = await subtask_service.default_assignees(
        db, fields["vendor_type_id"], fields["assigned_users"],
    )

    attachment_url = None
    if file is not None and file.filename:
        attachment_url = await save_attachment(await file.read(), file.filename, auth.user_id)

    return await crud.create_subtask(
        db, inspection_id, fields.pop("description"),
        room_name=(room_name or "").strip() or None,
        attachment_url=attachment_url,
        created_by=auth.user_id,
        **fields,
    )


@router.get("/subtasks/{subtask_id}", response_model=SubtaskRead)
async def get_subtask(
    subtask_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await _get_or_404(db, subtask_id)


@router.patch("/subtasks/{subtask_id}", response_model=SubtaskRead)
async def edit_subtask(
    subtask_id: str,
    body: SubtaskUpdate,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    sub = await _get_or_404(db, subtask_id)
    try:
        fields = subtask_service.normalize_edit(
            body.description, body.assigned_users, body.inventory_quantity, body.inventory_type_id,
            body.vendor_type_id,
        )
    except SubtaskValidationError as e:
        raise HTTPException(400, str(e))
    return await subtask_service.edit_subtask(db, sub, **fields)


@router.delete("/subtasks/{subtask_id}")
async def delete_subtask(
    subtask_id: str,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    sub = await _get_or_404(db, subtask_id)
    await crud.delete_subtask(db, sub)
    return {"ok": True}


@router.post("/subtasks/{subtask_id}/fail", response_model=SubtaskRead)
async def fail_subtask(
    subtask_id: str,
    body: SubtaskFail,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    sub = await _get_or_404(db, subtask_id)
    if not await crud.get_profile(db, body.assignee_id):
        raise HTTPException(400, "Assignee not found")
    try:
        return await subtask_service.mark_failed(db, sub, body.notes, body.assignee_id, auth.user_id)
    except SubtaskValidationError as e:
        raise HTTPException(400, str(e))


@router.post("/subtasks/{subtask_id}/quantity", response_model=SubtaskRead)
async def set_quantity(
    subtask_id: str,
    body: SubtaskQuantity,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    sub = await _get_or_404(db, subtask_id)
    try:
        qty = subtask_service.parse_quantity(body.quantity)
    except SubtaskValidationError as e:
        raise HTTPException(400, str(e))
    return await crud.update_subtask(db, sub, inventory_quantity=qty)


@router.post("/subtasks/{subtask_id}/toggle-complete", response_model=SubtaskRead)
async def toggle_complete(
    subtask_id: str,
    auth: AuthContext = Depends(require_editor),
    db: AsyncSession = Depends(get_db),
):
    sub = await _get_or_404(db, subtask_id)
    return await subtask_service.toggle_subtask_complete(db, sub, auth.user_id)


@router.get("/subtasks/{subtask_id}/activity", response_model=list[SubtaskActivityRead])
async def subtask_activity(
    subtask_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await _get_or_404(db, subtask_id)
    return await crud.list_subtask_activity(db, subtask_id)
