"""Dashboard endpoint: greeting and summary counts for the caller's tasks."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, require_member
from app.core.database import get_session
from app.services.dashboard import build_dashboard
from daftar_shared.schemas.dashboard import DashboardResponse

router = APIRouter()


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await build_dashboard(session, current.profile)
