"""
Redis Rate Limit Store

"""
from datetime import datetime, timezone
import logging
from typing import Optional

import redis.asyncio as redis

from medchat.core.domain.entities import RateLimitWindow
from medchat.core.domain.repositories import RateLimitStore
from medchat.core.domain.value_objects import UserId
from medchat.shared.constants import RateLimitConstants
from medchat.shared.exceptions import RepositoryError


logger = logging.getLogger(__name__)


class RedisRateLimitStore(RateLimitStore):
    """
    Rate-limit windows in Redis.

    One hash per user holds ``count`` and ``reset_at`` (epoch seconds);
    the key expires when the window ends.
    """

    def __init__(self, client: "redis.Redis", key_prefix: str = RateLimitConstants.REDIS_KEY_PREFIX):
        self._client = client
        self._key_prefix = key_prefix

    @classmethod
    def from_url(cls, redis_url: str) -> "RedisRateLimitStore":
        return cls(redis.from_url(redis_url, decode_responses=True))

    @property
    def backend_name(self) -> str:
        return "redis"

    def _key(self, user_id: UserId) -> str:
        return f"{self._key_prefix}{user_id.value}"

    async def get_window(self, user_id: UserId) -> Optional[RateLimitWindow]:
        try:
            data = await self._client.hgetall(self._key(user_id))
        except Exception as e:
            raise RepositoryError(f"Failed to read rate limit window from Redis: {str(e)}")

        if not data or "count" not in data or "reset_at" not in data:
            return None

        return RateLimitWindow(
            user_id=user_id,
            request_count=int(data["count"]),
            reset_at=datetime.fromtimestamp(float(data["reset_at"]), tz=timezone.utc)
        )

    async def save_window(self, window: RateLimitWindow) -> None:
        key = self._key(window.user_id)
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.hset(key, mapping={
                    "count": window.request_count,
                    "reset_at": window.reset_at.timestamp(),
                })
                pipe.expireat(key, int(window.reset_at.timestamp()) + 1)
                await pipe.execute()
        except Exception as e:
            raise RepositoryError(f"Failed to save rate limit window to Redis: {str(e)}")

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except Exception as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.aclose()
