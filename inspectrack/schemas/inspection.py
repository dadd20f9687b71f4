from __future__ import annotations
import datetime as dt
from pydantic import BaseModel, Field, field_validator

from inspectrack.models.inspection import INSPECTION_TYPES


def _check_type(v: str) -> str:
    if v not in INSPECTION_TYPES:
        raise ValueError(f"type must be one of: {', '.join(INSPECTION_TYPES)}")
    return v


def _check_time(v: str) -> str:
    parts = v.split(":")
    if len(parts) < 2 or not all(p.isdigit() for p in parts[:2]):
        raise ValueError("time must be HH:MM")
    h, m = int(parts[0]), int(parts[1])
    if not (0 <= h < 24 and 0 <= m < 60):
        raise ValueError("time must be HH:MM")
    return f"{h:02d}:{m:02d}"


class InspectionCreate(BaseModel):
    property_id: str
    unit_id: str | None = None
    type: str
    date: dt.date
    time: str
    duration: int | None = None
    parent_inspection_id: str | None = None

    @field_validator("type")
    @classmethod
    def check_type(cls, v: str) -> str:
        return _check_type(v)

    @field_validator("time")
    @classmethod
    def check_time(cls, v: str) -> str:
        return _check_time(v)


class InspectionUpdate(BaseModel):
    type: str | None = None
    date: dt.date | None = None
    time: str | None = None
    duration: int | None = None
    unit_id: str | None = None

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        return _check_type(v) if v is not None else v

    @field_validator("time")
    @classmethod
    def check_time(cls, v):
        return _check_time(v) if v is not None else v


class InspectionRead(BaseModel):
    id: str
    property_id: str
    unit_id: str | None = None
    type: str
    date: dt.date
    time: str
    duration: int | None = None
    parent_inspection_id: str | None = None
    inspection_template_id: str | None = None
    completed: bool = False
    completed_by: str | None = None
    attachment_url: str | None = None
    archived: bool = False
    created_at: dt.datetime

    model_config = {"from_attributes": True}


class FollowUpCreate(BaseModel):
    type: str
    date: dt.date
    time: str

    @field_validator("type")
    @classmethod
    def check_type(cls, v: str) -> str:
        return _check_type(v)

    @field_validator("time")
    @classmethod
    def check_time(cls, v: str) -> str:
        return _check_time(v)


class FollowUpRead(BaseModel):
    inspection: InspectionRead
    subtasks_copied: int


class BulkComplete(BaseModel):
    ids: list[str] = Field(min_length=1)


class BulkDelete(BaseModel):
    ids: list[str] = Field(min_length=1)
    keep_for_analytics: bool = True


class BulkResult(BaseModel):
    ok: bool = True
    count: int
