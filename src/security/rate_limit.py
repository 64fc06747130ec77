"""Rate limiting for place searches and other billable external calls."""

import time
from typing import Optional

import redis.asyncio as redis


class RateLimiter:
    """Redis-based sliding-window rate limiter."""

    def __init__(
        self,
        redis_url: str,
        max_requests: int = 10,
        window_seconds: int = 60,
    ):
        """Initialize rate limiter."""
        self.redis_url = redis_url
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._client: redis.Redis | None = None

    async def connect(self) -> None:
        """Establish Redis connection."""
        self._client = await redis.from_url(self.redis_url, encoding="utf-8")

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()

    async def check_rate_limit(self, requester: str, action: str) -> tuple[bool, Optional[int]]:
        """Record one request and report whether it is within the limit.

        Returns:
            (is_allowed, retry_after_seconds)
        """
        if not self._client:
            raise RuntimeError("Redis client not connected")

        key = f"pt:ratelimit:{action}:{requester}"
        now = time.time()

        await self._client.zremrangebyscore(key, 0, now - self.window_seconds)

        count = await self._client.zcard(key)

        if count >= self.max_requests:
            oldest = await self._client.zrange(key, 0, 0, withscores=True)
            if oldest:
                retry_after = int(oldest[0][1] + self.window_seconds - now)
                return False, max(retry_after, 1)
            return False, self.window_seconds

        await self._client.zadd(key, {str(now): now})
        await self._client.expire(key, self.window_seconds)

        return True, None
