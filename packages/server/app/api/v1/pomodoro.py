"""Pomodoro endpoints. The timer state is kept per user in Redis."""

from fastapi import APIRouter, Depends

from app.core.auth import CurrentUser, require_member
from app.services import pomodoro as pomodoro_service
from daftar_shared.schemas.pomodoro import PomodoroState

router = APIRouter()


@router.get("", response_model=PomodoroState)
async def get_timer(current: CurrentUser = Depends(require_member)):
    return await pomodoro_service.get_state(current.user_id)


@router.post("/toggle", response_model=PomodoroState)
async def toggle_timer(current: CurrentUser = Depends(require_member)):
    """Start or pause the countdown."""
    return await pomodoro_service.toggle(current.user_id)


@router.post("/reset", response_model=PomodoroState)
async def reset_timer(current: CurrentUser = Depends(require_member)):
    """Stop and reload the current mode's full duration."""
    return await pomodoro_service.reset(current.user_id)
