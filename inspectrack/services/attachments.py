"""Attachment storage, the serve-attachment proxy helpers, and the viewer model.

Blobs live on disk at {storage.base_dir}/{bucket}/{path}. Public URLs follow
the hosted-storage shape:

    {public_base_url}/storage/v1/object/public/{bucket}/{path}

The viewer never hits that URL directly; it goes through the serve-attachment
function so the response carries a usable Content-Type.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable
from urllib.parse import quote

from inspectrack.config import get_settings

logger = logging.getLogger(__name__)

_settings = get_settings()
_BASE = Path(_settings.storage.base_dir)

CONTENT_TYPES = {
    "pdf": "application/pdf",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "txt": "text/plain",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"

_PUBLIC_PATH_RE = re.compile(r"/storage/v1/object/public/([^/]+)/(.+)")


class AttachmentNotFound(Exception):
    pass


def content_type_for(path: str) -> str:
    """Map the path's extension to a MIME type; unknown -> octet-stream."""
    name = path.rsplit("/", 1)[-1]
    ext = name.rsplit(".", 1)[-1].lower() if "." in name else ""
    return CONTENT_TYPES.get(ext, DEFAULT_CONTENT_TYPE)


def filename_for(path: str) -> str:
    return path.split("/")[-1]


def extract_storage_path(url: str) -> tuple[str, str] | None:
    """Return (bucket, path) for a public storage URL, else None."""
    m = _PUBLIC_PATH_RE.search(url)
    if not m:
        return None
    return m.group(1), m.group(2)


def public_url(bucket: str, path: str) -> str:
    base = _settings.storage.public_base_url.rstrip("/")
    return f"{base}/storage/v1/object/public/{bucket}/{path}"


def proxy_url(url: str) -> str:
    """Route a public storage URL through serve-attachment; other URLs pass through."""
    info = extract_storage_path(url)
    if not info:
        return url
    bucket, path = info
    base = _settings.storage.functions_base_url.rstrip("/")
    return (
        f"{base}/functions/v1/serve-attachment"
        f"?bucket={quote(bucket, safe='')}&path={quote(path, safe='')}"
    )


# ── Blob storage ─────────────────────────────────────────

def _resolve(bucket: str, path: str) -> Path:
    """Resolve bucket/path under the storage root, refusing traversal."""
    root = (_BASE / bucket).resolve()
    target = (root / path).resolve()
    if bucket in ("", ".", "..") or "/" in bucket or root not in target.parents:
        raise AttachmentNotFound(f"Object not found: {bucket}/{path}")
    return target


def _upload_sync(bucket: str, path: str, data: bytes) -> str:
    target = _resolve(bucket, path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    return str(target)


def _download_sync(bucket: str, path: str) -> bytes:
    target = _resolve(bucket, path)
    if not target.is_file():
        raise AttachmentNotFound(f"Object not found: {bucket}/{path}")
    return target.read_bytes()


async def upload(bucket: str, path: str, data: bytes) -> str:
    """Store a blob. Returns its public URL."""
    await asyncio.to_thread(_upload_sync, bucket, path, data)
    return public_url(bucket, path)


async def download(bucket: str, path: str) -> bytes:
    return await asyncio.to_thread(_download_sync, bucket, path)


async def save_attachment(data: bytes, filename: str, user_id: str) -> str:
    """Store an uploaded attachment under {user_id}/{millis}.{ext}. Returns the public URL."""
    ext = filename.rsplit(".", 1)[-1].lower() if filename and "." in filename else "bin"
    key = f"{user_id}/{int(time.time() * 1000)}.{ext}"
    return await upload(_settings.storage.attachments_bucket, key, data)


# ── Viewer ───────────────────────────────────────────────

def viewer_kind(content_type: str) -> str:
    """pdf | image | download"""
    if content_type == "application/pdf":
        return "pdf"
    if content_type.startswith("image/"):
        return "image"
    return "download"


def fit_page_scale(page_width: float, container_width: float) -> float:
    """Scale factor that makes a rendered page exactly as wide as its container."""
    if page_width <= 0 or container_width <= 0:
        return 1.0
    return container_width / page_width


@dataclass
class FetchedAttachment:
    data: bytes
    content_type: str
    file_name: str

    @property
    def kind(self) -> str:
        return viewer_kind(self.content_type)


Fetcher = Callable[[str], Awaitable[tuple[bytes, str]]]


class AttachmentViewer:
    """One attachment dialog: a single fetch on open, payload released on close."""

    def __init__(self, url: str, fetcher: Fetcher):
        self.url = url
        self._fetcher = fetcher
        self.current: FetchedAttachment | None = None
        self.is_open = False
        self.fetch_count = 0

    async def open(self) -> FetchedAttachment:
        if self.is_open and self.current is not None:
            return self.current
        self.is_open = True
        self.fetch_count += 1
        data, content_type = await self._fetcher(proxy_url(self.url))
        self.current = FetchedAttachment(
            data=data,
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            file_name=self.url.split("/")[-1] or "attachment",
        )
        return self.current

    def close(self) -> None:
        self.is_open = False
        self.current = None
