from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel

from inspectrack.schemas.subtask import SubtaskRead


class RunCustomItem(BaseModel):
    description: str
    room_name: str | None = None
    inventory_type_id: str | None = None
    inventory_quantity: int | None = None
    vendor_type_id: str | None = None
    passed: bool = False
    notes: str | None = None


class RunSubmit(BaseModel):
    template_id: str
    # Template item ids the inspector ticked off as fine
    passed_item_ids: list[str] = []
    # Template item id -> note appended to the recorded issue
    notes: dict[str, str] = {}
    custom_items: list[RunCustomItem] = []
    assignee_id: str | None = None


class InspectionRunRead(BaseModel):
    id: str
    inspection_id: str
    template_id: str | None = None
    started_by: str | None = None
    started_at: datetime
    completed_at: datetime | None = None
    completed_by: str | None = None

    model_config = {"from_attributes": True}


class RunResultRead(BaseModel):
    run: InspectionRunRead
    items_total: int
    items_passed: int
    issues_recorded: int
    issues: list[SubtaskRead] = []
