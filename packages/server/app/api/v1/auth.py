"""
Authentication endpoints.

- Email/Password registration & login
- JWT session management (refresh, logout)
"""

from __future__ import annotations

import uuid

import jwt
import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import (
    CSRF_COOKIE,
    SESSION_COOKIE,
    create_jwt,
    decode_jwt,
    generate_csrf_token,
    hash_password,
    is_jwt_revoked,
    revoke_jwt,
    verify_password,
)
from app.core.config import get_settings
from app.core.database import get_session
from app.models.profile import Profile
from app.services.profiles import create_profile, get_profile_by_email

log = structlog.get_logger()
settings = get_settings()
router = APIRouter()

MIN_PASSWORD_LENGTH = 8

# Cookie config
COOKIE_KWARGS = {
    "httponly": True,
    "secure": not settings.debug,  # allow non-HTTPS in dev
    "samesite": "lax",
    "path": "/",
    "max_age": settings.jwt_expire_minutes * 60,
}


def _set_session_cookies(response: Response, token: str, csrf: str) -> None:
    """Set the session JWT and CSRF cookies on a response."""
    response.set_cookie(key=SESSION_COOKIE, value=token, **COOKIE_KWARGS)
    response.set_cookie(
        key=CSRF_COOKIE,
        value=csrf,
        httponly=False,  # JS must read this
        secure=not settings.debug,
        samesite="lax",
        path="/",
        max_age=settings.jwt_expire_minutes * 60,
    )


def _start_session(response: Response, profile: Profile) -> None:
    token, _jti = create_jwt(user_id=profile.id, role=profile.role)
    _set_session_cookies(response, token, generate_csrf_token())


# ---------------------------------------------------------------------------
# Email/Password Registration
# ---------------------------------------------------------------------------

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: str = Field(min_length=1, max_length=200)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class AuthResponse(BaseModel):
    user_id: str
    email: str
    role: str
    message: str


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    """Register with email/password. The first account becomes the admin."""
    if len(body.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400, detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    profile = await create_profile(
        session,
        email=body.email,
        password_hash=hash_password(body.password),
        full_name=body.full_name.strip(),
    )
    await session.commit()
    _start_session(response, profile)

    log.info("user.registered", user_id=str(profile.id), role=profile.role)
    return AuthResponse(
        user_id=str(profile.id),
        email=profile.email,
        role=profile.role,
        message="Registration successful",
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    """Authenticate with email/password and receive a JWT session."""
    profile = await get_profile_by_email(session, body.email)

    if not profile or not profile.password_hash:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not verify_password(body.password, profile.password_hash):
        log.warning("auth.login_failure", email=body.email, reason="bad_password")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    _start_session(response, profile)

    log.info("auth.login_success", user_id=str(profile.id))
    return AuthResponse(
        user_id=str(profile.id),
        email=profile.email,
        role=profile.role,
        message="Login successful",
    )


# ---------------------------------------------------------------------------
# Session Management
# ---------------------------------------------------------------------------

@router.post("/refresh")
async def refresh_session(
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    """Refresh the current JWT session by issuing a new token."""
    token = request.cookies.get(SESSION_COOKIE)
    if not token:
        raise HTTPException(status_code=401, detail="No active session")

    try:
        payload = decode_jwt(token)
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    jti = payload.get("jti")
    if jti and await is_jwt_revoked(jti):
        raise HTTPException(status_code=401, detail="Session has been revoked")

    profile = await session.get(Profile, uuid.UUID(payload["sub"]))
    if not profile:
        raise HTTPException(status_code=401, detail="User not found")

    # Issue new JWT, revoke old one
    _start_session(response, profile)
    if jti:
        await revoke_jwt(jti)

    return {"message": "Session refreshed"}


@router.post("/logout")
async def logout(request: Request, response: Response):
    """Invalidate the current session."""
    token = request.cookies.get(SESSION_COOKIE)
    if token:
        try:
            payload = decode_jwt(token)
        except jwt.PyJWTError:
            log.debug("auth.logout_invalid_token")
        else:
            jti = payload.get("jti")
            if jti:
                await revoke_jwt(jti)

    response.delete_cookie(SESSION_COOKIE, path="/")
    response.delete_cookie(CSRF_COOKIE, path="/")
    return {"message": "Logged out"}
