"""Top-level router that includes every resource router."""

from fastapi import APIRouter

from inspectrack.api.auth import router as auth_router
from inspectrack.api.properties import router as properties_router
from inspectrack.api.floorplans import router as floorplans_router
from inspectrack.api.inspections import router as inspections_router
from inspectrack.api.subtasks import router as subtasks_router
from inspectrack.api.tasks import router as tasks_router
from inspectrack.api.templates import router as templates_router
from inspectrack.api.room_templates import router as room_templates_router
from inspectrack.api.inventory_types import router as inventory_types_router
from inspectrack.api.vendor_types import router as vendor_types_router
from inspectrack.api.views import router as views_router
from inspectrack.api.functions import router as functions_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(properties_router)
api_router.include_router(floorplans_router)
api_router.include_router(inspections_router)
api_router.include_router(subtasks_router)
api_router.include_router(tasks_router)
api_router.include_router(templates_router)
api_router.include_router(room_templates_router)
api_router.include_router(inventory_types_router)
api_router.include_router(vendor_types_router)
api_router.include_router(views_router)
api_router.include_router(functions_router)
