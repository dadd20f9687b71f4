from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel

from inspectrack.schemas.inspection import InspectionRead


class SubtaskRead(BaseModel):
    id: str
    inspection_id: str
    original_inspection_id: str
    description: str
    room_name: str | None = None
    assigned_users: list[str] | None = None
    attachment_url: str | None = None
    inventory_type_id: str | None = None
    inventory_quantity: int | None = None
    vendor_type_id: str | None = None
    inspection_run_id: str | None = None
    completed: bool = False
    completed_at: datetime | None = None
    completed_by: str | None = None
    status: str | None = None
    status_changed_at: datetime | None = None
    status_changed_by: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class SubtaskUpdate(BaseModel):
    description: str
    assigned_users: list[str] | None = None
    inventory_quantity: int | None = None
    inventory_type_id: str | None = None
    vendor_type_id: str | None = None


class SubtaskFail(BaseModel):
    notes: str
    assignee_id: str


class SubtaskQuantity(BaseModel):
    quantity: int | str


class SubtaskActivityRead(BaseModel):
    id: str
    subtask_id: str
    activity_type: str
    notes: str | None = None
    old_value: str | None = None
    new_value: str | None = None
    created_by: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class TaskGroupRead(BaseModel):
    inspection: InspectionRead
    property_name: str = ""
    property_address: str = ""
    tasks: list[SubtaskRead] = []


class TaskBoardRead(BaseModel):
    upcoming: list[TaskGroupRead] = []
    overdue: list[TaskGroupRead] = []
