"""Tests for the fixed-window rate limiter and its stores."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from medchat.core.domain.entities import RateLimitWindow
from medchat.core.domain.services import RateLimiter
from medchat.core.domain.value_objects import UserId
from medchat.infrastructure.adapters.database.repositories import DatabaseRateLimitStore
from medchat.infrastructure.adapters.rate_limit import InMemoryRateLimitStore, RedisRateLimitStore
from medchat.shared.exceptions import RateLimitExceededError, RepositoryError


NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return InMemoryRateLimitStore()


@pytest.fixture
def limiter(store):
    return RateLimiter(store=store, limit=3, window_seconds=60)


class TestFixedWindow:
    async def test_requests_within_limit_are_allowed(self, limiter):
        user_id = UserId.generate()
        decisions = [await limiter.check(user_id, NOW) for _ in range(3)]

        assert all(d.allowed for d in decisions)
        assert [d.remaining for d in decisions] == [2, 1, 0]
        assert decisions[0].reset_at == NOW + timedelta(seconds=60)

    async def test_request_over_limit_is_denied_without_counting(self, limiter, store):
        user_id = UserId.generate()
        for _ in range(3):
            await limiter.check(user_id, NOW)

        denied = await limiter.check(user_id, NOW + timedelta(seconds=10))
        assert not denied.allowed
        assert denied.remaining == 0
        assert denied.retry_after_seconds == 50
        assert (await store.get_window(user_id)).request_count == 3

    async def test_window_resets_after_expiry(self, limiter):
        user_id = UserId.generate()
        for _ in range(4):
            await limiter.check(user_id, NOW)

        decision = await limiter.check(user_id, NOW + timedelta(seconds=60))
        assert decision.allowed
        assert decision.remaining == 2
        assert decision.reset_at == NOW + timedelta(seconds=120)

    async def test_users_are_counted_separately(self, limiter):
        first, second = UserId.generate(), UserId.generate()
        for _ in range(3):
            await limiter.check(first, NOW)

        assert not (await limiter.check(first, NOW)).allowed
        assert (await limiter.check(second, NOW)).allowed

    async def test_retry_after_is_at_least_one_second(self, limiter):
        user_id = UserId.generate()
        for _ in range(3):
            await limiter.check(user_id, NOW)

        denied = await limiter.check(user_id, NOW + timedelta(seconds=59, milliseconds=900))
        assert denied.retry_after_seconds == 1

    def test_limit_and_window_must_be_positive(self, store):
        with pytest.raises(ValueError):
            RateLimiter(store=store, limit=0, window_seconds=60)
        with pytest.raises(ValueError):
            RateLimiter(store=store, limit=1, window_seconds=0)


class TestEnforceAndStatus:
    async def test_enforce_raises_with_retry_after(self, limiter):
        user_id = UserId.generate()
        for _ in range(3):
            await limiter.enforce(user_id, NOW)

        with pytest.raises(RateLimitExceededError) as exc_info:
            await limiter.enforce(user_id, NOW + timedelta(seconds=30))

        assert exc_info.value.retry_after_seconds == 30
        assert exc_info.value.limit == 3

    async def test_status_does_not_consume_quota(self, limiter):
        user_id = UserId.generate()
        fresh = await limiter.status(user_id, NOW)
        assert fresh.remaining == 3
        assert fresh.reset_at is None

        await limiter.check(user_id, NOW)
        await limiter.status(user_id, NOW)
        assert (await limiter.status(user_id, NOW)).remaining == 2

    def test_denied_decision_headers_include_retry_after(self):
        window = RateLimitWindow(user_id=UserId.generate(), request_count=3, reset_at=NOW + timedelta(seconds=5))
        limiter = RateLimiter(store=InMemoryRateLimitStore(), limit=3, window_seconds=60)
        headers = limiter._decision(window, allowed=False, now=NOW).headers()

        assert headers["Retry-After"] == "5"
        assert headers["X-RateLimit-Remaining"] == "0"
        assert headers["X-RateLimit-Reset"] == str(int((NOW + timedelta(seconds=5)).timestamp()))


class TestDatabaseStore:
    async def test_window_persists_between_calls(self, db_manager, stored_profile):
        store = DatabaseRateLimitStore(db_manager)
        limiter = RateLimiter(store=store, limit=2, window_seconds=60)

        assert (await limiter.check(stored_profile.user_id, NOW)).allowed
        assert (await limiter.check(stored_profile.user_id, NOW)).allowed
        assert not (await limiter.check(stored_profile.user_id, NOW)).allowed

        window = await store.get_window(stored_profile.user_id)
        assert window.request_count == 2
        assert window.reset_at == NOW + timedelta(seconds=60)

    async def test_unknown_user_has_no_window(self, db_manager):
        store = DatabaseRateLimitStore(db_manager)
        assert await store.get_window(UserId.generate()) is None


class TestRedisStore:
    @pytest.fixture
    def redis_client(self):
        pipeline = MagicMock()
        pipeline.__aenter__.return_value = pipeline
        pipeline.execute = AsyncMock(return_value=[2, True])

        client = MagicMock()
        client.pipeline.return_value = pipeline
        client.hgetall = AsyncMock(return_value={})
        return client

    async def test_missing_key_means_no_window(self, redis_client):
        store = RedisRateLimitStore(redis_client)
        assert await store.get_window(UserId.generate()) is None

    async def test_window_is_read_from_hash(self, redis_client):
        redis_client.hgetall.return_value = {"count": "4", "reset_at": str(NOW.timestamp())}
        user_id = UserId.generate()

        window = await RedisRateLimitStore(redis_client).get_window(user_id)

        redis_client.hgetall.assert_awaited_once_with(f"medchat:rate_limit:{user_id.value}")
        assert window.request_count == 4
        assert window.reset_at == NOW

    async def test_save_writes_hash_and_expiry(self, redis_client):
        user_id = UserId.generate()
        await RedisRateLimitStore(redis_client).save_window(
            RateLimitWindow(user_id=user_id, request_count=2, reset_at=NOW)
        )

        pipeline = redis_client.pipeline.return_value
        key = f"medchat:rate_limit:{user_id.value}"
        pipeline.hset.assert_called_once_with(key, mapping={"count": 2, "reset_at": NOW.timestamp()})
        pipeline.expireat.assert_called_once_with(key, int(NOW.timestamp()) + 1)
        pipeline.execute.assert_awaited_once()

    async def test_redis_errors_become_repository_errors(self, redis_client):
        redis_client.hgetall.side_effect = ConnectionError("refused")
        with pytest.raises(RepositoryError):
            await RedisRateLimitStore(redis_client).get_window(UserId.generate())
