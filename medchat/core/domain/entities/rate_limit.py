"""
Rate Limit Window Entity
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta

from ..value_objects import UserId


@dataclass
class RateLimitWindow:
    """
    Per-user request counter for one fixed window.

    The window is open while ``now < reset_at``; once the reset time has
    passed the next request starts a new window.
    """
    user_id: UserId
    request_count: int
    reset_at: datetime

    def __post_init__(self) -> None:
        if self.request_count < 0:
            raise ValueError("Request count cannot be negative")

    @classmethod
    def start(cls, user_id: UserId, now: datetime, window_seconds: int) -> RateLimitWindow:
        """Open a new window holding the current request."""
        return cls(
            user_id=user_id,
            request_count=1,
            reset_at=now + timedelta(seconds=window_seconds)
        )

    def is_expired(self, now: datetime) -> bool:
        return now >= self.reset_at

    def increment(self) -> None:
        self.request_count += 1
