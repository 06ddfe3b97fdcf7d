"""
Rate Limit Store Interface

"""
from abc import ABC, abstractmethod
from typing import Optional

from ..entities import RateLimitWindow
from ..value_objects import UserId


class RateLimitStore(ABC):
    """
    Storage for per-user rate-limit windows.

    Implementations only persist windows; the fixed-window policy itself
    lives in the RateLimiter domain service.
    """

    @abstractmethod
    async def get_window(self, user_id: UserId) -> Optional[RateLimitWindow]:
        """Return the user's current window, or None if there is none."""
        pass

    @abstractmethod
    async def save_window(self, window: RateLimitWindow) -> None:
        """Create or replace the user's window."""
        pass

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Short name reported by the health endpoint."""
        pass
