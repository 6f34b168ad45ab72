"""
Profile and team endpoints.

GET    /api/v1/profile              - Current profile
PATCH  /api/v1/profile              - Update full_name
POST   /api/v1/profile/avatar       - Upload avatar image
GET    /api/v1/team                 - List all team members
PATCH  /api/v1/team/{profile_id}    - Change a member's role (admin)
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, require_admin, require_member
from app.core.database import get_session
from app.services import profiles as profile_service
from daftar_shared.schemas.profiles import (
    ProfileResponse,
    ProfileUpdateRequest,
    RoleUpdateRequest,
    TeamListResponse,
)

log = structlog.get_logger()

# ---------------------------------------------------------------------------
# Own profile
# ---------------------------------------------------------------------------
router_profile = APIRouter()


@router_profile.get("", response_model=ProfileResponse)
async def get_profile(current: CurrentUser = Depends(require_member)):
    return ProfileResponse.model_validate(current.profile)


@router_profile.patch("", response_model=ProfileResponse)
async def update_profile(
    body: ProfileUpdateRequest,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    profile = await profile_service.update_profile(session, current.profile, body)
    await session.commit()
    return ProfileResponse.model_validate(profile)


@router_profile.post("/avatar", response_model=ProfileResponse)
async def upload_avatar(
    file: UploadFile = File(...),
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """Upload an image to the avatars bucket and use it as the profile picture."""
    profile = await profile_service.upload_avatar(session, current.profile, file)
    await session.commit()
    return ProfileResponse.model_validate(profile)


# ---------------------------------------------------------------------------
# Team
# ---------------------------------------------------------------------------
router_team = APIRouter()


@router_team.get("", response_model=TeamListResponse)
async def list_team(
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    profiles = await profile_service.list_team(session)
    return TeamListResponse(data=[ProfileResponse.model_validate(p) for p in profiles])


@router_team.patch("/{profile_id}", response_model=ProfileResponse)
async def change_role(
    profile_id: uuid.UUID,
    body: RoleUpdateRequest,
    current: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Promote or demote a team member. The last admin cannot be demoted."""
    profile = await profile_service.change_role(session, profile_id, body.role)
    await session.commit()
    log.info("team.role_changed", by=str(current.user_id), profile_id=str(profile_id), role=body.role.value)
    return ProfileResponse.model_validate(profile)
