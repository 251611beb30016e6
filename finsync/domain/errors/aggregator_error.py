"""Aggregator error types for the AggregatorProtocol contract.

Aggregator client implementations return these errors in Result types.
The resilient client boundary retries transient errors and passes fatal
errors through untouched.

Usage:
    from finsync.domain.errors import AggregatorTransientError

    return Failure(
        error=AggregatorTransientError(
            code=ErrorCode.AGGREGATOR_UNAVAILABLE,
            message="Aggregator returned HTTP 503",
            kind=TransientErrorKind.SERVER_ERROR,
            status_code=503,
        )
    )
"""

from dataclasses import dataclass

from finsync.core.errors import DomainError
from finsync.domain.enums import FatalErrorKind, TransientErrorKind


@dataclass(frozen=True, slots=True, kw_only=True)
class AggregatorError(DomainError):
    """Base aggregator API error.

    Attributes:
        status_code: HTTP status reported by the aggregator, when known.
    """

    status_code: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class AggregatorTransientError(AggregatorError):
    """Timeout, 5xx or rate-limited response.

    Recovery: Retry with exponential backoff.

    Attributes:
        kind: Which transient failure occurred.
        retry_after: Seconds the aggregator asked callers to wait, if any.
    """

    kind: TransientErrorKind
    retry_after: float | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class AggregatorFatalError(AggregatorError):
    """Authentication, permission or invalid account failure.

    Recovery: None inside a run. The user must re-link the account.

    Attributes:
        kind: Which fatal failure occurred.
    """

    kind: FatalErrorKind
