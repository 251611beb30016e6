"""Rate limit rule value object.

Immutable configuration for the aggregator token bucket: capacity, refill
rate and cost per request.

Usage:
    from finsync.domain.value_objects import RateLimitRule

    rule = RateLimitRule(max_tokens=20, refill_rate=60.0)
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitRule:
    """Token bucket configuration (value object).

    Token Bucket Algorithm:
        - Bucket starts full (max_tokens)
        - Each aggregator request consumes `cost` tokens
        - Tokens refill at `refill_rate` per minute
        - If not enough tokens, the caller is told how long to wait

    Attributes:
        max_tokens: Maximum tokens in bucket (burst capacity).
        refill_rate: Tokens added per minute.
            60.0 = 1 token per second.
        cost: Tokens consumed per request.
        enabled: Whether this rule is active. Disabled rules always allow.

    Raises:
        ValueError: If max_tokens <= 0 or refill_rate <= 0 or cost <= 0.
    """

    max_tokens: int
    refill_rate: float
    cost: int = 1
    enabled: bool = True

    def __post_init__(self) -> None:
        """Validate rule configuration after initialization.

        Raises:
            ValueError: If any numeric field is invalid.
        """
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")
        if self.refill_rate <= 0:
            raise ValueError(f"refill_rate must be positive, got {self.refill_rate}")
        if self.cost <= 0:
            raise ValueError(f"cost must be positive, got {self.cost}")
        if self.cost > self.max_tokens:
            raise ValueError(
                f"cost ({self.cost}) cannot exceed max_tokens ({self.max_tokens})"
            )

    @property
    def seconds_per_token(self) -> float:
        """Seconds between token refills.

        Example:
            RateLimitRule(max_tokens=5, refill_rate=5.0).seconds_per_token  # 12.0
        """
        return 60.0 / self.refill_rate

    @property
    def ttl_seconds(self) -> int:
        """Redis key TTL: time to full refill plus a 60 second buffer."""
        return int((self.max_tokens / self.refill_rate) * 60) + 60


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitResult:
    """Result of one token bucket check.

    Attributes:
        allowed: Whether the tokens were consumed.
        retry_after: Seconds until enough tokens are available (0 if allowed).
        remaining: Tokens left in the bucket.
        limit: Bucket capacity.
    """

    allowed: bool
    retry_after: float = 0.0
    remaining: int = 0
    limit: int = 0
