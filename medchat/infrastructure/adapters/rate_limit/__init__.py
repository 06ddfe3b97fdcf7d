from .memory_store import InMemoryRateLimitStore
from .redis_store import RedisRateLimitStore

__all__ = [
    "InMemoryRateLimitStore",
    "RedisRateLimitStore",
]
