from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel


class VendorTypeCreate(BaseModel):
    name: str
    default_assigned_user_id: str | None = None


class VendorTypeUpdate(BaseModel):
    name: str
    default_assigned_user_id: str | None = None


class VendorTypeRead(BaseModel):
    id: str
    name: str
    default_assigned_user_id: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
