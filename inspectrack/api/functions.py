"""Edge-function style endpoints: cascade-delete and serve-attachment.

cascade-delete answers every failure with 400 and {ok: false, error}, so the
body and the bearer token are read by hand instead of through dependencies.
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.db.engine import get_db
from inspectrack.services.attachments import (
    AttachmentNotFound, content_type_for, download, filename_for,
)
from inspectrack.services.auth import bearer_token, context_for, resolve_token
from inspectrack.services.cascade import CascadeDeleteError, cascade_delete

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["functions"])


def _fail(message: str) -> JSONResponse:
    return JSONResponse({"ok": False, "error": message}, status_code=400)


@router.post("/cascade-delete")
async def cascade_delete_fn(request: Request, db: AsyncSession = Depends(get_db)):
    token = bearer_token(request)
    if not token:
        return _fail("Unauthorized")
    profile = await resolve_token(token, db)
    if not profile:
        return _fail("Unauthorized")

    try:
        body = json.loads(await request.body() or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _fail("Invalid request body")
    if not isinstance(body, dict):
        return _fail("Invalid request body")

    target_type = body.get("type")
    target_id = body.get("id")
    if not isinstance(target_id, str):
        target_id = ""

    try:
        result = await cascade_delete(db, str(target_type or ""), target_id, context_for(profile))
    except CascadeDeleteError as e:
        logger.warning(f"cascade-delete refused for user {profile.id}: {e}")
        return _fail(str(e))
    return {"ok": True, "deleted": result.deleted}


@router.get("/serve-attachment")
async def serve_attachment(bucket: str | None = None, path: str | None = None):
    """Stream a stored object with a Content-Type derived from its extension."""
    if not bucket or not path:
        return JSONResponse({"error": "Missing bucket or path parameter"}, status_code=400)
    try:
        data = await download(bucket, path)
    except (AttachmentNotFound, OSError) as e:
        logger.warning(f"serve-attachment {bucket}/{path} failed: {e}")
        return JSONResponse({"error": str(e)}, status_code=404)

    filename = filename_for(path).replace('"', "")
    return Response(
        content=data,
        media_type=content_type_for(path),
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )
