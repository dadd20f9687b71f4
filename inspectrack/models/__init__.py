"""SQLAlchemy ORM models."""

from inspectrack.models.base import Base
from inspectrack.models.profile import Profile, UserSession
from inspectrack.models.property import Property, Unit, Floorplan
from inspectrack.models.inventory_type import InventoryType
from inspectrack.models.vendor_type import VendorType
from inspectrack.models.template import (
    InspectionTemplate, TemplateRoom, TemplateItem, TemplateProperty, RoomTemplate, RoomTemplateItem,
)
from inspectrack.models.inspection import Inspection, InspectionRun, INSPECTION_TYPES
from inspectrack.models.subtask import Subtask, SubtaskActivity

__all__ = [
    "Base", "Profile", "UserSession",
    "Property", "Unit", "Floorplan", "InventoryType", "VendorType",
    "InspectionTemplate", "TemplateRoom", "TemplateItem", "TemplateProperty",
    "RoomTemplate", "RoomTemplateItem",
    "Inspection", "InspectionRun", "INSPECTION_TYPES",
    "Subtask", "SubtaskActivity",
]
