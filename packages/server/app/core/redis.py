"""Redis connection management and key naming.

Redis holds short-lived state only: revoked session ids, the activity
buffer/pub-sub channel and each user's Pomodoro timer.
"""

from __future__ import annotations

import redis.asyncio as redis

from app.core.config import get_settings

settings = get_settings()

KEY_PREFIX = "dt"

_client: redis.Redis | None = None


def redis_key(*parts: object) -> str:
    """Build a namespaced key, e.g. redis_key("pomodoro", user_id) -> "dt:pomodoro:<id>"."""
    return ":".join([KEY_PREFIX, *(str(p) for p in parts)])


async def get_redis() -> redis.Redis:
    """Get or create the shared Redis client."""
    global _client
    if _client is None:
        _client = redis.from_url(settings.redis_url, decode_responses=True)
    return _client


async def ping_redis() -> bool:
    """Readiness probe helper; False when Redis is unreachable."""
    try:
        client = await get_redis()
        return bool(await client.ping())
    except redis.RedisError:
        return False


async def close_redis() -> None:
    """Close the Redis client on shutdown."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
