from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel


class TemplateItemCreate(BaseModel):
    description: str
    order_index: int | None = None
    inventory_type_id: str | None = None
    inventory_quantity: int | None = None
    vendor_type_id: str | None = None


class TemplateItemRead(BaseModel):
    id: str
    room_id: str
    description: str
    order_index: int
    inventory_type_id: str | None = None
    inventory_quantity: int | None = None
    vendor_type_id: str | None = None

    model_config = {"from_attributes": True}


class TemplateRoomCreate(BaseModel):
    name: str = ""
    order_index: int | None = None
    # Copy name and items from a library room; explicit name/items win
    room_template_id: str | None = None
    items: list[TemplateItemCreate] = []


class TemplateRoomRead(BaseModel):
    id: str
    template_id: str
    name: str
    order_index: int
    room_template_id: str | None = None
    items: list[TemplateItemRead] = []

    model_config = {"from_attributes": True}


class TemplateCreate(BaseModel):
    name: str
    type: str | None = None
    property_ids: list[str] = []
    rooms: list[TemplateRoomCreate] = []


class TemplateUpdate(BaseModel):
    name: str | None = None
    type: str | None = None


class TemplateRead(BaseModel):
    id: str
    name: str
    type: str | None = None
    created_at: datetime
    rooms: list[TemplateRoomRead] = []

    model_config = {"from_attributes": True}


class TemplateApply(BaseModel):
    template_id: str


class TemplateApplyRead(BaseModel):
    ok: bool
    partial: bool
    rooms_total: int
    rooms_applied: int
    subtasks_created: int
    failed_rooms: list[str] = []


# ── Room library ─────────────────────────────────────────

class RoomTemplateItemRead(BaseModel):
    id: str
    room_template_id: str
    description: str
    order_index: int
    inventory_type_id: str | None = None
    inventory_quantity: int | None = None
    vendor_type_id: str | None = None

    model_config = {"from_attributes": True}


class RoomTemplateCreate(BaseModel):
    name: str
    items: list[TemplateItemCreate] = []


class RoomTemplateRead(BaseModel):
    id: str
    name: str
    created_at: datetime
    items: list[RoomTemplateItemRead] = []

    model_config = {"from_attributes": True}
