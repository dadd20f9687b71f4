"""The assigned-tasks board."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.db.engine import get_db
from inspectrack.dependencies import require_auth
from inspectrack.services.auth import AuthContext
from inspectrack.services.tasks import TaskGroup, assigned_tasks
from inspectrack.schemas import InspectionRead, SubtaskRead, TaskBoardRead, TaskGroupRead

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def _group_read(group: TaskGroup) -> TaskGroupRead:
    prop = group.inspection.property
    return TaskGroupRead(
        inspection=InspectionRead.model_validate(group.inspection),
        property_name=prop.name if prop else "",
        property_address=(prop.address or "") if prop else "",
        tasks=[SubtaskRead.model_validate(t) for t in group.tasks],
    )


@router.get("", response_model=TaskBoardRead)
async def list_tasks(
    show_all: bool = False,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    """Open tasks assigned to the caller, or everyone's with show_all."""
    board = await assigned_tasks(db, auth.user_id, show_all=show_all)
    return TaskBoardRead(
        upcoming=[_group_read(g) for g in board.upcoming],
        overdue=[_group_read(g) for g in board.overdue],
    )
