"""
API v1 Router

Every endpoint requires a signed-in team member unless noted otherwise.
"""

from fastapi import APIRouter
from . import calendar, clients, dashboard, events, pomodoro, processes, projects, tasks
from .profiles import router_profile, router_team

router = APIRouter()

router.include_router(router_profile, prefix="/profile", tags=["Profile"])
router.include_router(router_team, prefix="/team", tags=["Team"])
router.include_router(clients.router, prefix="/clients", tags=["Clients"])
router.include_router(processes.router, prefix="/processes", tags=["Processes"])
router.include_router(processes.router_stages, prefix="/stages", tags=["Processes"])
router.include_router(projects.router, prefix="/projects", tags=["Projects"])
router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
router.include_router(calendar.router, prefix="/calendar", tags=["Calendar"])
router.include_router(pomodoro.router, prefix="/pomodoro", tags=["Pomodoro"])
router.include_router(events.router, prefix="/events", tags=["Events"])


@router.get("/", tags=["API"])
async def api_root():
    """API root - returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/profile",
            "/team",
            "/clients",
            "/processes",
            "/projects",
            "/tasks",
            "/dashboard",
            "/calendar",
            "/pomodoro",
            "/events",
        ],
    }
