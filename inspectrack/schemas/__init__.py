"""Pydantic request/response schemas."""

from inspectrack.schemas.property import (
    PropertyCreate, PropertyRead, PropertyUpdate, UnitCreate, UnitRead, UnitUpdate,
    FloorplanCreate, FloorplanRead,
)
from inspectrack.schemas.inspection import (
    InspectionCreate, InspectionRead, InspectionUpdate, FollowUpCreate, FollowUpRead,
    BulkComplete, BulkDelete, BulkResult,
)
from inspectrack.schemas.subtask import (
    SubtaskRead, SubtaskUpdate, SubtaskFail, SubtaskQuantity, SubtaskActivityRead,
    TaskGroupRead, TaskBoardRead,
)
from inspectrack.schemas.template import (
    TemplateCreate, TemplateRead, TemplateUpdate, TemplateRoomCreate, TemplateRoomRead,
    TemplateItemCreate, TemplateItemRead, TemplateApply, TemplateApplyRead,
    RoomTemplateCreate, RoomTemplateRead, RoomTemplateItemRead,
)
from inspectrack.schemas.run import RunCustomItem, RunSubmit, InspectionRunRead, RunResultRead
from inspectrack.schemas.profile import ProfileRead, RegisterRequest, LoginRequest, TokenResponse
from inspectrack.schemas.inventory_type import InventoryTypeCreate, InventoryTypeRead
from inspectrack.schemas.vendor_type import VendorTypeCreate, VendorTypeRead, VendorTypeUpdate

__all__ = [
    "PropertyCreate", "PropertyRead", "PropertyUpdate", "UnitCreate", "UnitRead", "UnitUpdate",
    "FloorplanCreate", "FloorplanRead",
    "InspectionCreate", "InspectionRead", "InspectionUpdate", "FollowUpCreate", "FollowUpRead",
    "BulkComplete", "BulkDelete", "BulkResult",
    "SubtaskRead", "SubtaskUpdate", "SubtaskFail", "SubtaskQuantity", "SubtaskActivityRead",
    "TaskGroupRead", "TaskBoardRead",
    "TemplateCreate", "TemplateRead", "TemplateUpdate", "TemplateRoomCreate", "TemplateRoomRead",
    "TemplateItemCreate", "TemplateItemRead", "TemplateApply", "TemplateApplyRead",
    "RoomTemplateCreate", "RoomTemplateRead", "RoomTemplateItemRead",
    "RunCustomItem", "RunSubmit", "InspectionRunRead", "RunResultRead",
    "ProfileRead", "RegisterRequest", "LoginRequest", "TokenResponse",
    "InventoryTypeCreate", "InventoryTypeRead",
    "VendorTypeCreate", "VendorTypeRead", "VendorTypeUpdate",
]
