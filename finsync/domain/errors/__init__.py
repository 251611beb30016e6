"""Domain errors.

Usage:
    from finsync.domain.errors import AggregatorFatalError, StoreCommitError
"""

from finsync.domain.errors.aggregator_error import (
    AggregatorError,
    AggregatorFatalError,
    AggregatorTransientError,
)
from finsync.domain.errors.lock_error import LockServiceError
from finsync.domain.errors.rate_limit_error import GateRejectedError
from finsync.domain.errors.store_error import (
    StoreCommitError,
    StoreReadError,
    StoreWriteError,
)
from finsync.domain.errors.sync_error import (
    SyncAlreadyInProgressError,
    SyncCancelledError,
    SyncLockLostError,
    SyncUnexpectedError,
)
from finsync.domain.errors.transaction_error import (
    RecordRejectedError,
    TransactionNotFoundError,
)

__all__ = [
    "AggregatorError",
    "AggregatorFatalError",
    "AggregatorTransientError",
    "GateRejectedError",
    "LockServiceError",
    "RecordRejectedError",
    "StoreCommitError",
    "StoreReadError",
    "StoreWriteError",
    "SyncAlreadyInProgressError",
    "SyncCancelledError",
    "SyncLockLostError",
    "SyncUnexpectedError",
    "TransactionNotFoundError",
]
