"""
In-memory stand-in for the redis.asyncio client used by the server tests.

Covers only the commands the server issues: string get/set with expiry,
lists for the event buffer, pipelines and Pub/Sub.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict


class MockPubSub:
    def __init__(self, redis: "MockRedis"):
        self._redis = redis
        self.queue: asyncio.Queue = asyncio.Queue()
        self.channels: set[str] = set()
        self.closed = False

    async def subscribe(self, *channels: str) -> None:
        for channel in channels:
            self.channels.add(channel)
            self._redis.subscribers[channel].append(self)

    async def unsubscribe(self, *channels: str) -> None:
        for channel in channels or tuple(self.channels):
            self.channels.discard(channel)
            if self in self._redis.subscribers[channel]:
                self._redis.subscribers[channel].remove(self)

    async def get_message(self, ignore_subscribe_messages: bool = False, timeout: float = 0.0):
        try:
            return await asyncio.wait_for(self.queue.get(), timeout=min(timeout, 0.05))
        except asyncio.TimeoutError:
            return None

    async def aclose(self) -> None:
        self.closed = True


class MockPipeline:
    def __init__(self, redis: "MockRedis"):
        self._redis = redis
        self._ops: list[tuple[str, tuple]] = []

    def lpush(self, *args):
        self._ops.append(("lpush", args))

    def ltrim(self, *args):
        self._ops.append(("ltrim", args))

    def expire(self, *args):
        self._ops.append(("expire", args))

    async def execute(self):
        return [await getattr(self._redis, name)(*args) for name, args in self._ops]

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class MockRedis:
    def __init__(self):
        self.strings: dict[str, str] = {}
        self.lists: dict[str, list[str]] = defaultdict(list)
        self.ttls: dict[str, int] = {}
        self.published: list[tuple[str, str]] = []
        self.subscribers: dict[str, list[MockPubSub]] = defaultdict(list)

    async def ping(self) -> bool:
        return True

    async def get(self, key: str):
        return self.strings.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.strings[key] = value
        self.ttls[key] = ttl
        return True

    async def exists(self, *keys: str) -> int:
        return sum(1 for k in keys if k in self.strings or self.lists.get(k))

    async def lpush(self, key: str, *values: str) -> int:
        for value in values:
            self.lists[key].insert(0, value)
        return len(self.lists[key])

    async def ltrim(self, key: str, start: int, end: int) -> bool:
        self.lists[key] = self.lists[key][start:end + 1]
        return True

    async def lrange(self, key: str, start: int, end: int) -> list[str]:
        items = self.lists.get(key, [])
        return items[start:] if end == -1 else items[start:end + 1]

    async def expire(self, key: str, ttl: int) -> bool:
        self.ttls[key] = ttl
        return True

    async def publish(self, channel: str, message: str) -> int:
        self.published.append((channel, message))
        for sub in self.subscribers[channel]:
            sub.queue.put_nowait({"type": "message", "channel": channel, "data": message})
        return len(self.subscribers[channel])

    def pipeline(self) -> MockPipeline:
        return MockPipeline(self)

    def pubsub(self) -> MockPubSub:
        return MockPubSub(self)
