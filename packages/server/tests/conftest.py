"""
Shared fixtures for server tests.

The API runs against an in-memory SQLite database (aiosqlite) and an
in-memory Redis double; settings are pinned through DAFTAR_* variables
before the application is imported.
"""

import os
import tempfile

os.environ.setdefault("DAFTAR_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DAFTAR_SECRET_KEY", "test-secret-key-for-daftar-tests-only")
os.environ.setdefault("DAFTAR_DEBUG", "false")
os.environ.setdefault("DAFTAR_STORAGE_ROOT", tempfile.mkdtemp(prefix="daftar-storage-"))
os.environ.setdefault("DAFTAR_LOG_FORMAT", "text")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import app.models  # noqa: F401  populate metadata
from app.core import auth as core_auth
from app.core import events as core_events
from app.core import redis as core_redis
from app.core.auth import CSRF_COOKIE
from app.core.database import get_session
from app.main import app as fastapi_app
from app.services import pomodoro as pomodoro_service

from mock_redis import MockRedis

DEFAULT_PASSWORD = "password123"


@pytest.fixture
def redis_mock(monkeypatch):
    """Route every get_redis() call to one in-memory MockRedis."""
    mock = MockRedis()

    async def _get_redis():
        return mock

    for module in (core_redis, core_auth, core_events, pomodoro_service):
        monkeypatch.setattr(module, "get_redis", _get_redis)
    return mock


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(session_factory, redis_mock):
    async def _get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_session] = _get_session
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def make_client(app):
    """Factory for independent clients (one cookie jar per simulated user)."""
    def _make() -> AsyncClient:
        return AsyncClient(transport=ASGITransport(app=app), base_url="https://test")

    return _make


@pytest.fixture
async def anon_client(make_client):
    async with make_client() as client:
        yield client


async def register(client: AsyncClient, email: str, full_name: str = "کاربر تست", password: str = DEFAULT_PASSWORD):
    """Register through the API and arm the client with the CSRF header."""
    resp = await client.post(
        "/auth/register",
        json={"email": email, "password": password, "full_name": full_name},
    )
    assert resp.status_code == 201, resp.text
    client.headers["X-CSRF-Token"] = client.cookies[CSRF_COOKIE]
    return resp.json()


@pytest.fixture
async def admin_client(make_client):
    """First registered user: the admin."""
    async with make_client() as client:
        client.user = await register(client, "admin@example.com", "مدیر")
        yield client


@pytest.fixture
async def member_client(make_client, admin_client):
    """Second registered user: a member."""
    async with make_client() as client:
        client.user = await register(client, "member@example.com", "عضو")
        yield client


@pytest.fixture
def register_user():
    return register
