"""Profiles (user accounts) and their bearer-token sessions."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from inspectrack.models.base import Base, ULIDMixin


class Profile(Base, ULIDMixin):
    __tablename__ = "profiles"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(20), default="inspector")  # admin | inspector | viewer
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class UserSession(Base, ULIDMixin):
    __tablename__ = "user_sessions"

    user_id: Mapped[str] = mapped_column(String(26), ForeignKey("profiles.id"))
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
