"""Retry policy value object.

Describes how transient aggregator failures are retried: how many attempts,
and how long to wait between them (exponential backoff, capped, jittered).
The policy is pure data plus arithmetic; the aggregator boundary owns the
sleeping.

Usage:
    policy = RetryPolicy(max_attempts=5, base_delay=2.0)
    policy.delay_for(1)  # ~2.0
    policy.delay_for(3)  # ~8.0
"""

import random
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class RetryPolicy:
    """Exponential backoff retry policy.

    delay(attempt) = min(max_delay, base_delay * 2 ** (attempt - 1)),
    then scaled by a random factor in [1 - jitter, 1 + jitter]. A server
    supplied ``retry_after`` is a lower bound on the delay.

    Attributes:
        max_attempts: Total attempts including the first call.
        base_delay: Delay in seconds after the first failed attempt.
        max_delay: Upper bound on the computed backoff in seconds.
        jitter: Relative jitter in [0, 1]. 0 disables jitter.
    """

    max_attempts: int = 5
    base_delay: float = 2.0
    max_delay: float = 60.0
    jitter: float = 0.1

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay < 0:
            raise ValueError(f"base_delay must be >= 0, got {self.base_delay}")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")
        if not 0 <= self.jitter <= 1:
            raise ValueError(f"jitter must be within [0, 1], got {self.jitter}")

    def delay_for(
        self,
        attempt: int,
        *,
        retry_after: float | None = None,
        rng: Callable[[], float] = random.random,
    ) -> float:
        """Seconds to wait before the attempt following ``attempt``.

        Args:
            attempt: 1-based number of the attempt that just failed.
            retry_after: Server supplied minimum wait, if any.
            rng: Source of uniform floats in [0, 1) for jitter.

        Returns:
            Non-negative delay in seconds.
        """
        backoff = min(self.max_delay, self.base_delay * 2 ** (attempt - 1))
        if self.jitter:
            backoff *= 1 - self.jitter + 2 * self.jitter * rng()
        if retry_after is not None:
            backoff = max(backoff, retry_after)
        return max(0.0, backoff)
