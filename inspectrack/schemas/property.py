from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel


class FloorplanCreate(BaseModel):
    name: str


class FloorplanRead(BaseModel):
    id: str
    name: str
    created_at: datetime

    model_config = {"from_attributes": True}


class UnitCreate(BaseModel):
    name: str
    floorplan_id: str | None = None
    # Creates the floorplan on the fly; wins over floorplan_id
    new_floorplan_name: str | None = None


class UnitUpdate(BaseModel):
    name: str | None = None
    floorplan_id: str | None = None
    new_floorplan_name: str | None = None


class UnitRead(BaseModel):
    id: str
    property_id: str
    name: str
    floorplan_id: str | None = None
    floorplan: FloorplanRead | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class PropertyCreate(BaseModel):
    name: str
    address: str = ""
    units: list[str] = []


class PropertyUpdate(BaseModel):
    name: str | None = None
    address: str | None = None


class PropertyRead(BaseModel):
    id: str
    name: str
    address: str = ""
    created_by: str | None = None
    created_at: datetime
    units: list[UnitRead] = []

    model_config = {"from_attributes": True}
