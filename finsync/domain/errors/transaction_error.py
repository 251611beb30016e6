"""Transaction reconciliation and lookup errors."""

from dataclasses import dataclass

from finsync.core.errors import DomainError, NotFoundError
from finsync.domain.enums import RejectReason


@dataclass(frozen=True, slots=True, kw_only=True)
class RecordRejectedError(DomainError):
    """A remote record could not be reconciled.

    Isolated per record: collected on the run, never aborts the batch.

    Attributes:
        external_id: Aggregator identifier of the rejected record (may be empty).
        reason: Machine-readable rejection reason.
    """

    external_id: str
    reason: RejectReason


@dataclass(frozen=True, slots=True, kw_only=True)
class TransactionNotFoundError(NotFoundError):
    """Transaction does not exist in the store."""

    pass
