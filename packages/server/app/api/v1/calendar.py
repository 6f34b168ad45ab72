"""Calendar endpoint: a Jalali month grid with the tasks due each day."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, require_member
from app.core.database import get_session
from app.services.calendar import build_month
from daftar_shared.schemas.calendar import CalendarMonth

router = APIRouter()


@router.get("", response_model=CalendarMonth)
async def get_calendar(
    year: Optional[int] = Query(None, ge=1, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """Defaults to the current Jalali month."""
    return await build_month(session, year=year, month=month)
