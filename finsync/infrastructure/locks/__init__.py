"""Account lock adapters.

Usage:
    from finsync.infrastructure.locks import InMemoryAccountLock, RedisAccountLock
"""

from finsync.infrastructure.locks.in_memory_lock import InMemoryAccountLock
from finsync.infrastructure.locks.redis_lock import RedisAccountLock

__all__ = ["InMemoryAccountLock", "RedisAccountLock"]
