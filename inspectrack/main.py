"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inspectrack.api.router import api_router
from inspectrack.config import get_settings
from inspectrack.db.engine import create_all, engine
from inspectrack.logging_config import configure_logging

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_all()
    Path(settings.storage.base_dir, settings.storage.attachments_bucket).mkdir(parents=True, exist_ok=True)
    logger.info("Inspectrack started")
    yield
    await engine.dispose()


app = FastAPI(
    title="Inspectrack",
    description="Property inspection scheduling, checklists, and follow-up tracking.",
    version="0.1.0",
    lifespan=lifespan,
)

# Browser clients call /functions/v1/* cross-origin and send a preflight first
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.allow_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=settings.cors.allow_headers,
)

app.include_router(api_router)


@app.get("/health")
async def health():
    return {"ok": True}
