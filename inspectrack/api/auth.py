"""Account endpoints: register, login, logout, current user, profile lookup."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.db import crud
from inspectrack.db.engine import get_db
from inspectrack.dependencies import require_auth
from inspectrack.services.auth import (
    AuthContext, bearer_token, create_session, hash_password, remove_session, verify_password,
)
from inspectrack.schemas import LoginRequest, ProfileRead, RegisterRequest, TokenResponse

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/auth/register", response_model=TokenResponse, status_code=201)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    if await crud.get_profile_by_email(db, body.email):
        raise HTTPException(409, "Email already registered")
    profile = await crud.create_profile(db, body.email, hash_password(body.password), body.full_name)
    token = await create_session(profile, db)
    return TokenResponse(access_token=token, user=ProfileRead.model_validate(profile))


@router.post("/auth/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    profile = await crud.get_profile_by_email(db, body.email)
    if not profile or not profile.is_active or not verify_password(body.password, profile.password_hash):
        raise HTTPException(401, "Invalid email or password")
    token = await create_session(profile, db)
    return TokenResponse(access_token=token, user=ProfileRead.model_validate(profile))


@router.post("/auth/logout")
async def logout(
    request: Request,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await remove_session(bearer_token(request), db)
    return {"ok": True}


@router.get("/auth/me", response_model=ProfileRead)
async def me(
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await crud.get_profile(db, auth.user_id)


@router.get("/profiles", response_model=list[ProfileRead])
async def list_profiles(
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    """Assignable users, ordered by name."""
    return await crud.list_profiles(db)
