"""Rate/concurrency gate error types.

Note that a bucket DENY that the caller can wait out is NOT an error; only a
deny beyond the caller's wait budget becomes GateRejectedError.
"""

from dataclasses import dataclass

from finsync.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class GateRejectedError(DomainError):
    """The gate could not grant a permit within the wait budget.

    Retryable: the aggregator boundary treats it as a rate-limited response.

    Attributes:
        retry_after: Seconds until a permit is likely to be available.
        reason: "rate_limited" or "concurrency_limited".
    """

    retry_after: float = 0.0
    reason: str = "rate_limited"
