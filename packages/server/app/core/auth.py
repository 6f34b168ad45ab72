"""
Authentication and authorization for Daftar.

Supports:
- Email/Password login with bcrypt-hashed passwords
- JWT session cookie with Redis revocation list
- Team role dependencies (member / admin)
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
import structlog
from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_session
from app.core.redis import get_redis, redis_key
from app.models.profile import Profile
from daftar_shared.schemas.common import Role

log = structlog.get_logger()
settings = get_settings()

SESSION_COOKIE = "dt_session"
CSRF_COOKIE = "dt_csrf"

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    """Hash a password using bcrypt with cost factor 12."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=12)).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash."""
    return bcrypt.checkpw(password.encode(), hashed.encode())


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_jwt(
    user_id: uuid.UUID,
    role: str,
    *,
    expires_delta: timedelta | None = None,
) -> tuple[str, str]:
    """Create a signed JWT. Returns (token, jti)."""
    jti = str(uuid.uuid4())
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": str(user_id),
        "role": role,
        "iat": now,
        "exp": exp,
        "jti": jti,
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return token, jti


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


# ---------------------------------------------------------------------------
# JWT Revocation (Redis)
# ---------------------------------------------------------------------------

async def revoke_jwt(jti: str, ttl_seconds: int | None = None) -> None:
    """Add a JWT ID to the revocation list until the token would have expired anyway."""
    redis = await get_redis()
    ttl = ttl_seconds or settings.jwt_expire_minutes * 60
    await redis.setex(redis_key("jwt", "revoked", jti), ttl, "1")


async def is_jwt_revoked(jti: str) -> bool:
    """Check if a JWT ID has been revoked."""
    redis = await get_redis()
    return await redis.exists(redis_key("jwt", "revoked", jti)) > 0


# ---------------------------------------------------------------------------
# CSRF Token
# ---------------------------------------------------------------------------

def generate_csrf_token() -> str:
    """Generate a random CSRF token."""
    return secrets.token_urlsafe(32)


# ---------------------------------------------------------------------------
# Authentication dependencies
# ---------------------------------------------------------------------------

class CurrentUser:
    """Container for the authenticated profile."""

    def __init__(self, profile: Profile):
        self.profile = profile
        self.user_id = profile.id
        self.role = profile.role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


async def get_current_user(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> CurrentUser:
    """Resolve the profile behind the session cookie."""
    token = request.cookies.get(SESSION_COOKIE)
    if not token:
        raise HTTPException(status_code=401, detail="Authentication required")

    try:
        payload = decode_jwt(token)
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    jti = payload.get("jti")
    if jti and await is_jwt_revoked(jti):
        raise HTTPException(status_code=401, detail="Session has been revoked")

    try:
        user_id = uuid.UUID(payload["sub"])
    except (KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    profile = await session.get(Profile, user_id)
    if not profile:
        raise HTTPException(status_code=401, detail="User not found")

    current = CurrentUser(profile)
    request.state.user = current
    return current


# ---------------------------------------------------------------------------
# Authorization dependencies (role checks)
# ---------------------------------------------------------------------------

async def require_member(
    current: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Any signed-in team member can access this endpoint."""
    return current


async def require_admin(
    current: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Requires the admin role. The role is read from the profile, not the token."""
    if not current.is_admin:
        log.warning("auth.forbidden", user_id=str(current.user_id), role=current.role)
        raise HTTPException(status_code=403, detail="Administrator access required")
    return current
