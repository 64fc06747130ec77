"""Unit tests for the Redis rate limiter and review locks."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from src.security.rate_limit import RateLimiter
from src.storage.redis_locks import RedisLockHelper


@pytest.fixture
def redis_client():
    client = AsyncMock()
    client.zremrangebyscore = AsyncMock()
    client.zcard = AsyncMock(return_value=0)
    client.zadd = AsyncMock()
    client.expire = AsyncMock()
    client.zrange = AsyncMock(return_value=[])
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock()
    return client


class TestRateLimiter:
    @pytest.mark.asyncio
    async def test_request_within_limit_is_recorded(self, redis_client):
        limiter = RateLimiter("redis://localhost", max_requests=2, window_seconds=60)
        limiter._client = redis_client

        allowed, retry_after = await limiter.check_rate_limit("admin-1", "place_search")

        assert allowed is True
        assert retry_after is None
        redis_client.zadd.assert_awaited_once()
        assert redis_client.zadd.await_args.args[0] == "pt:ratelimit:place_search:admin-1"

    @pytest.mark.asyncio
    async def test_request_over_limit_reports_retry_after(self, redis_client, monkeypatch):
        monkeypatch.setattr("src.security.rate_limit.time.time", lambda: 1000.0)
        redis_client.zcard.return_value = 2
        redis_client.zrange.return_value = [(b"970.0", 970.0)]
        limiter = RateLimiter("redis://localhost", max_requests=2, window_seconds=60)
        limiter._client = redis_client

        allowed, retry_after = await limiter.check_rate_limit("admin-1", "place_search")

        assert allowed is False
        assert retry_after == 30
        redis_client.zadd.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_requires_connection(self):
        with pytest.raises(RuntimeError):
            await RateLimiter("redis://localhost").check_rate_limit("admin-1", "place_search")


class TestReviewLock:
    @pytest.mark.asyncio
    async def test_lock_released_after_use(self, redis_client):
        helper = RedisLockHelper("redis://localhost", ttl_seconds=5)
        helper._client = redis_client
        user_id = uuid4()

        async with helper.acquire_review_lock(user_id) as acquired:
            assert acquired is True

        key = f"pt:lock:verification:{user_id}"
        redis_client.set.assert_awaited_once_with(key, "1", ex=5, nx=True)
        redis_client.delete.assert_awaited_once_with(key)

    @pytest.mark.asyncio
    async def test_busy_lock_is_not_released(self, redis_client):
        redis_client.set.return_value = None
        helper = RedisLockHelper("redis://localhost")
        helper._client = redis_client

        async with helper.acquire_review_lock(uuid4()) as acquired:
            assert acquired is False

        redis_client.delete.assert_not_awaited()
