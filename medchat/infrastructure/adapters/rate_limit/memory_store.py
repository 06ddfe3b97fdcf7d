"""
In-Memory Rate Limit Store

"""
import asyncio
from dataclasses import replace
from typing import Dict, Optional

from medchat.core.domain.entities import RateLimitWindow
from medchat.core.domain.repositories import RateLimitStore
from medchat.core.domain.value_objects import UserId


class InMemoryRateLimitStore(RateLimitStore):
    """
    Process-local store for development and tests.

    Counters are lost on restart and are not shared between workers.
    """

    def __init__(self):
        self._windows: Dict[str, RateLimitWindow] = {}
        self._lock = asyncio.Lock()

    @property
    def backend_name(self) -> str:
        return "memory"

    async def get_window(self, user_id: UserId) -> Optional[RateLimitWindow]:
        async with self._lock:
            window = self._windows.get(user_id.value)
            # Callers mutate windows; hand out copies
            return replace(window) if window else None

    async def save_window(self, window: RateLimitWindow) -> None:
        async with self._lock:
            self._windows[window.user_id.value] = replace(window)
