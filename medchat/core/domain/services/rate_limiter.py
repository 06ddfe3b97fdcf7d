"""
Rate Limiter

Fixed-window request quota per user, independent of where the counters
are stored.
"""
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..entities import RateLimitWindow
from ..repositories import RateLimitStore
from ..value_objects import UserId
from medchat.shared.exceptions import RateLimitExceededError
from medchat.shared.utils import utc_now, ensure_utc


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a quota check."""
    allowed: bool
    limit: int
    remaining: int
    reset_at: Optional[datetime]
    retry_after_seconds: int = 0

    def headers(self) -> dict:
        """Response headers describing the quota."""
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
        }
        if self.reset_at is not None:
            headers["X-RateLimit-Reset"] = str(int(self.reset_at.timestamp()))
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after_seconds)
        return headers


class RateLimiter:
    """
    Fixed-window rate limiter.

    A user's first request opens a window of ``window_seconds`` holding a
    count of one. Further requests increment the count until it reaches
    ``limit``; after that requests are denied, without being counted,
    until the window's reset time passes and the next request opens a
    fresh window.

    The read and the write are two store calls, so two concurrent
    requests from the same user can both be admitted at the boundary.
    """

    def __init__(
        self,
        store: RateLimitStore,
        limit: int,
        window_seconds: int,
        clock: Callable[[], datetime] = utc_now
    ):
        if limit <= 0:
            raise ValueError("Rate limit must be positive")
        if window_seconds <= 0:
            raise ValueError("Rate limit window must be positive")

        self._store = store
        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> int:
        return self._window_seconds

    @property
    def backend_name(self) -> str:
        return self._store.backend_name

    async def check(self, user_id: UserId, now: Optional[datetime] = None) -> RateLimitDecision:
        """
        Count one request against the user's quota.

        Args:
            user_id: Requesting user
            now: Evaluation time, defaults to the limiter's clock

        Returns:
            Decision describing whether the request is admitted
        """
        now = ensure_utc(now or self._clock())
        window = await self._store.get_window(user_id)

        if window is None or window.is_expired(now):
            window = RateLimitWindow.start(user_id, now, self._window_seconds)
            await self._store.save_window(window)
            return self._decision(window, allowed=True, now=now)

        if window.request_count < self._limit:
            window.increment()
            await self._store.save_window(window)
            return self._decision(window, allowed=True, now=now)

        return self._decision(window, allowed=False, now=now)

    async def enforce(self, user_id: UserId, now: Optional[datetime] = None) -> RateLimitDecision:
        """
        Count one request and reject it when the quota is used up.

        Raises:
            RateLimitExceededError: If the request is denied
        """
        decision = await self.check(user_id, now)
        if not decision.allowed:
            self._logger.warning(
                f"Rate limit exceeded for user {user_id}, retry in {decision.retry_after_seconds}s"
            )
            raise RateLimitExceededError(
                user_id=str(user_id),
                limit=decision.limit,
                retry_after_seconds=decision.retry_after_seconds
            )
        return decision

    async def status(self, user_id: UserId, now: Optional[datetime] = None) -> RateLimitDecision:
        """Report the user's current quota without consuming any of it."""
        now = ensure_utc(now or self._clock())
        window = await self._store.get_window(user_id)

        if window is None or window.is_expired(now):
            return RateLimitDecision(
                allowed=True,
                limit=self._limit,
                remaining=self._limit,
                reset_at=None
            )

        return self._decision(window, allowed=window.request_count < self._limit, now=now)

    def _decision(self, window: RateLimitWindow, allowed: bool, now: datetime) -> RateLimitDecision:
        reset_at = ensure_utc(window.reset_at)
        retry_after = 0
        if not allowed:
            retry_after = max(math.ceil((reset_at - now).total_seconds()), 1)

        return RateLimitDecision(
            allowed=allowed,
            limit=self._limit,
            remaining=max(self._limit - window.request_count, 0),
            reset_at=reset_at,
            retry_after_seconds=retry_after
        )
