"""Application configuration loaded from config.yaml + environment variables."""

from __future__ import annotations

import yaml
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings

_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml() -> dict:
    if _CONFIG_PATH.exists():
        with open(_CONFIG_PATH) as f:
            return yaml.safe_load(f) or {}
    return {}


_yaml = _load_yaml()


class StorageConfig(BaseSettings):
    base_dir: str = "data/storage"
    attachments_bucket: str = "attachments"
    # Public object URLs look like {public_base_url}/storage/v1/object/public/{bucket}/{path}
    public_base_url: str = "http://localhost:8000"
    functions_base_url: str = "http://localhost:8000"


class CalendarConfig(BaseSettings):
    timezone: str = "America/Chicago"


class AnalyticsConfig(BaseSettings):
    upcoming_days: int = 30
    upcoming_weeks: int = 4
    trend_months: int = 6
    top_failed_items: int = 5


class CorsConfig(BaseSettings):
    allow_origins: list[str] = Field(default_factory=lambda: ["*"])
    allow_headers: list[str] = Field(default_factory=lambda: [
        "authorization", "x-client-info", "apikey", "content-type",
    ])


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///data/inspectrack.db"
    log_level: str = "INFO"
    session_max_age_days: int = 7
    storage: StorageConfig = Field(default_factory=StorageConfig)
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    cors: CorsConfig = Field(default_factory=CorsConfig)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


def get_settings() -> Settings:
    """Build Settings by merging YAML defaults with env overrides."""
    y = _yaml
    storage = StorageConfig(**y.get("storage", {}))
    cal = CalendarConfig(**y.get("calendar", {}))
    analytics = AnalyticsConfig(**y.get("analytics", {}))
    cors = CorsConfig(**y.get("cors", {}))
    kwargs = {}
    # Only pass YAML values explicitly so DATABASE_URL / LOG_LEVEL env vars still apply
    if y.get("database", {}).get("url"):
        kwargs["database_url"] = y["database"]["url"]
    if "log_level" in y:
        kwargs["log_level"] = y["log_level"]
    return Settings(
        storage=storage,
        calendar=cal,
        analytics=analytics,
        cors=cors,
        **kwargs,
    )
