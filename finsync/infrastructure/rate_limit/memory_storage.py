"""In-process token bucket storage.

Same algorithm as the Redis Lua script, kept in a dict. Used when only one
process talks to the aggregator, and in tests.
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass

from finsync.core.result import Result, Success
from finsync.domain.errors import GateRejectedError
from finsync.domain.value_objects.rate_limit_rule import RateLimitResult, RateLimitRule


@dataclass(slots=True)
class _Bucket:
    tokens: float
    updated_at: float


class InMemoryTokenBucketStorage:
    """Token buckets keyed by ``key_base``.

    Args:
        clock: Monotonic clock in seconds (injectable for tests).
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._buckets: dict[str, _Bucket] = {}
        self._mutex = asyncio.Lock()
        self._clock = clock

    async def check_and_consume(
        self,
        *,
        key_base: str,
        rule: RateLimitRule,
        cost: int = 1,
    ) -> Result[RateLimitResult, GateRejectedError]:
        """Refill by elapsed time, then consume ``cost`` tokens if available.

        Returns:
            Success(RateLimitResult) with retry_after set when denied.
        """
        async with self._mutex:
            now = self._clock()
            bucket = self._buckets.get(key_base)
            if bucket is None:
                bucket = _Bucket(tokens=float(rule.max_tokens), updated_at=now)
                self._buckets[key_base] = bucket

            per_second = rule.refill_rate / 60.0
            elapsed = max(0.0, now - bucket.updated_at)
            bucket.tokens = min(
                float(rule.max_tokens), bucket.tokens + elapsed * per_second
            )
            bucket.updated_at = now

            if bucket.tokens >= cost:
                bucket.tokens -= cost
                return Success(
                    value=RateLimitResult(
                        allowed=True,
                        remaining=int(bucket.tokens),
                        limit=rule.max_tokens,
                    )
                )

            return Success(
                value=RateLimitResult(
                    allowed=False,
                    retry_after=(cost - bucket.tokens) / per_second,
                    remaining=int(bucket.tokens),
                    limit=rule.max_tokens,
                )
            )

    async def reset(
        self,
        *,
        key_base: str,
        rule: RateLimitRule,
    ) -> Result[None, GateRejectedError]:
        """Refill the bucket to capacity."""
        async with self._mutex:
            self._buckets[key_base] = _Bucket(
                tokens=float(rule.max_tokens), updated_at=self._clock()
            )
        return Success(value=None)
