"""Token bucket storage protocol (port).

The rate/concurrency gate keeps its buckets behind this protocol so the same
gate runs against an in-process table or a shared Redis instance.

Fail-open:
    Implementations return Success(RateLimitResult(allowed=True, ...)) on
    infrastructure failures. A broken limiter must never stop syncs.
"""

from typing import Protocol

from finsync.core.result import Result
from finsync.domain.errors import GateRejectedError
from finsync.domain.value_objects.rate_limit_rule import RateLimitResult, RateLimitRule


class TokenBucketStorageProtocol(Protocol):
    """Protocol for token bucket storage backends."""

    async def check_and_consume(
        self,
        *,
        key_base: str,
        rule: RateLimitRule,
        cost: int = 1,
    ) -> Result[RateLimitResult, GateRejectedError]:
        """Atomically check the bucket and consume ``cost`` tokens if allowed.

        Args:
            key_base: Bucket key.
            rule: Bucket capacity and refill rate.
            cost: Tokens to consume. 0 peeks without consuming.

        Returns:
            Success(RateLimitResult) with the decision and retry_after.
        """
        ...

    async def reset(
        self,
        *,
        key_base: str,
        rule: RateLimitRule,
    ) -> Result[None, GateRejectedError]:
        """Refill the bucket to capacity. Reports real errors (no fail-open)."""
        ...
