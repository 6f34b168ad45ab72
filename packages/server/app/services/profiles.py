"""
Profile service: the caller's own profile, avatar upload and team roles.
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import HTTPException, UploadFile
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import get_settings
from app.core.storage import AVATARS_BUCKET, generate_object_name, get_storage, read_upload
from app.models.profile import Profile
from daftar_shared.schemas.common import Role
from daftar_shared.schemas.profiles import ProfileUpdateRequest

log = structlog.get_logger()


def display_name(profile: Profile | None) -> str | None:
    """full_name, falling back to the email address."""
    if profile is None:
        return None
    return profile.full_name or profile.email


async def get_profile_or_404(session: AsyncSession, profile_id: uuid.UUID) -> Profile:
    profile = await session.get(Profile, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


async def get_profile_by_email(session: AsyncSession, email: str) -> Profile | None:
    result = await session.execute(
        select(Profile).where(func.lower(Profile.email) == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def count_profiles(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(Profile))
    return result.scalar_one()


async def create_profile(
    session: AsyncSession,
    email: str,
    password_hash: str,
    full_name: str | None = None,
) -> Profile:
    """Create a profile. The very first profile becomes the admin."""
    if await get_profile_by_email(session, email):
        raise HTTPException(status_code=409, detail="Email is already registered")

    role = Role.ADMIN if await count_profiles(session) == 0 else Role.MEMBER
    profile = Profile(
        email=email.strip().lower(),
        full_name=full_name,
        role=role.value,
        password_hash=password_hash,
    )
    session.add(profile)
    await session.flush()
    log.info("profile.created", profile_id=str(profile.id), role=role.value)
    return profile


async def update_profile(
    session: AsyncSession, profile: Profile, body: ProfileUpdateRequest
) -> Profile:
    profile.full_name = body.full_name.strip()
    session.add(profile)
    await session.flush()
    return profile


async def upload_avatar(
    session: AsyncSession, profile: Profile, upload: UploadFile
) -> Profile:
    """Store the image in the avatars bucket and point avatar_url at it."""
    data = await read_upload(upload, get_settings().max_upload_bytes)
    name = f"{profile.id}/{generate_object_name(upload.filename or 'avatar')}"
    storage = get_storage()
    profile.avatar_url = await storage.upload(AVATARS_BUCKET, name, data)
    session.add(profile)
    await session.flush()
    log.info("profile.avatar_updated", profile_id=str(profile.id), size=len(data))
    return profile


async def list_team(session: AsyncSession) -> list[Profile]:
    result = await session.execute(select(Profile).order_by(Profile.created_at, Profile.email))
    return list(result.scalars().all())


async def change_role(
    session: AsyncSession, profile_id: uuid.UUID, role: Role
) -> Profile:
    """Set a member's role; the last remaining admin cannot be demoted."""
    profile = await get_profile_or_404(session, profile_id)
    if profile.role == Role.ADMIN.value and role != Role.ADMIN:
        result = await session.execute(
            select(func.count()).select_from(Profile).where(Profile.role == Role.ADMIN.value)
        )
        if result.scalar_one() <= 1:
            raise HTTPException(status_code=409, detail="Cannot demote the last admin")

    profile.role = role.value
    session.add(profile)
    await session.flush()
    log.info("profile.role_changed", profile_id=str(profile.id), role=role.value)
    return profile
