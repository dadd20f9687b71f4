"""Authentication service: DB-backed bearer tokens, bcrypt passwords."""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta

import bcrypt
from fastapi import Request, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.config import get_settings
from inspectrack.models import Profile, UserSession

SESSION_COOKIE_NAME = "session_token"


@dataclass
class AuthContext:
    user_id: str
    role: str  # 'admin' | 'inspector' | 'viewer'
    email: str
    full_name: str | None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def _hash_token(token: str) -> str:
    """SHA-256 hash of a session token for DB storage."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def bearer_token(request: Request) -> str | None:
    """Pull the token from `Authorization: Bearer ...`, falling back to the session cookie."""
    header = request.headers.get("Authorization")
    if header:
        scheme, _, token = header.strip().partition(" ")
        if scheme.lower() != "bearer":
            return None
        return token.strip() or None
    return request.cookies.get(SESSION_COOKIE_NAME)


async def create_session(profile: Profile, db: AsyncSession) -> str:
    """Create a DB-backed session. Returns the raw token (not the hash)."""
    token = secrets.token_urlsafe(48)
    expires_at = datetime.now(timezone.utc) + timedelta(days=get_settings().session_max_age_days)

    db.add(UserSession(user_id=profile.id, token_hash=_hash_token(token), expires_at=expires_at))
    await db.commit()
    return token


async def resolve_token(token: str, db: AsyncSession) -> Profile | None:
    """Look up session by token hash, return the Profile if valid."""
    result = await db.execute(
        select(UserSession).where(
            UserSession.token_hash == _hash_token(token),
            UserSession.expires_at > datetime.now(timezone.utc),
        )
    )
    session = result.scalars().first()
    if not session:
        return None

    profile = await db.get(Profile, session.user_id)
    if not profile or not profile.is_active:
        return None
    return profile


async def remove_session(token: str, db: AsyncSession) -> None:
    result = await db.execute(
        select(UserSession).where(UserSession.token_hash == _hash_token(token))
    )
    session = result.scalars().first()
    if session:
        await db.delete(session)
        await db.commit()


def context_for(profile: Profile) -> AuthContext:
    return AuthContext(
        user_id=profile.id,
        role=profile.role,
        email=profile.email,
        full_name=profile.full_name,
    )


async def get_current_user(request: Request, db: AsyncSession) -> AuthContext:
    """Read the bearer token, validate, return AuthContext or raise 401."""
    token = bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    profile = await resolve_token(token, db)
    if not profile:
        raise HTTPException(status_code=401, detail="Session expired")

    return context_for(profile)
