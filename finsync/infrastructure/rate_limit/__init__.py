"""Aggregator rate/concurrency gate and token bucket storage.

Usage:
    from finsync.infrastructure.rate_limit import RateConcurrencyGate
"""

from finsync.infrastructure.rate_limit.gate import Permit, RateConcurrencyGate
from finsync.infrastructure.rate_limit.memory_storage import InMemoryTokenBucketStorage
from finsync.infrastructure.rate_limit.redis_storage import RedisTokenBucketStorage

__all__ = [
    "InMemoryTokenBucketStorage",
    "Permit",
    "RateConcurrencyGate",
    "RedisTokenBucketStorage",
]
