"""
Daftar API Server

Entry point for the FastAPI application.
"""

from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.core.config import get_settings
from app.core.logging import configure_logging
from app.core.middleware import CSRFMiddleware, RequestContextMiddleware, SecurityHeadersMiddleware
from app.core.redis import close_redis, ping_redis
from app.core.storage import BUCKETS
from app.api.v1 import router as api_v1_router
from app.api.v1.auth import router as auth_router

settings = get_settings()
log = structlog.get_logger()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="Daftar",
        description="Persian project and task dashboard: processes, Kanban boards, calendar and Pomodoro.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Middleware; the last one added runs outermost
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(CSRFMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-CSRF-Token", "Last-Event-ID"],
    )
    app.add_middleware(RequestContextMiddleware)

    app.include_router(auth_router, prefix="/auth", tags=["Authentication"])
    app.include_router(api_v1_router, prefix="/api/v1")

    # Uploaded avatars and attachments
    storage_root = Path(settings.storage_root)
    for bucket in BUCKETS:
        (storage_root / bucket).mkdir(parents=True, exist_ok=True)
    app.mount(settings.storage_url_prefix, StaticFiles(directory=storage_root), name="storage")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness check endpoint; reports whether Redis answers."""
        redis_ok = await ping_redis()
        return {"status": "ready" if redis_ok else "degraded", "redis": redis_ok}

    @app.on_event("startup")
    async def on_startup():
        log.info("daftar.starting", timezone=settings.timezone, storage_root=str(storage_root))

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("daftar.shutting_down")
        await close_redis()

    return app


app = create_app()
