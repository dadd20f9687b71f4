from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel


class InventoryTypeCreate(BaseModel):
    name: str


class InventoryTypeRead(BaseModel):
    id: str
    name: str
    created_at: datetime

    model_config = {"from_attributes": True}
