"""Redis-based distributed locks for verification reviews."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator
from uuid import UUID

import redis.asyncio as redis


class RedisLockHelper:
    """Helper for Redis-based distributed locking."""

    def __init__(self, redis_url: str, ttl_seconds: int = 5):
        """Initialize Redis lock helper."""
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self._client: redis.Redis | None = None

    async def connect(self) -> None:
        """Establish Redis connection."""
        self._client = await redis.from_url(self.redis_url, encoding="utf-8")

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()

    @staticmethod
    def _review_key(user_id: UUID) -> str:
        return f"pt:lock:verification:{user_id}"

    @asynccontextmanager
    async def acquire_review_lock(
        self, user_id: UUID
    ) -> AsyncGenerator[bool, None]:
        """Acquire exclusive lock on a user's verification request.

        Yields whether the lock was obtained; another admin holding it means
        a review of the same request is already in flight.
        """
        if not self._client:
            raise RuntimeError("Redis client not connected")

        lock_key = self._review_key(user_id)
        acquired = False

        try:
            acquired = await self._client.set(
                lock_key, "1", ex=self.ttl_seconds, nx=True
            )
            yield bool(acquired)
        finally:
            if acquired:
                await self._client.delete(lock_key)
