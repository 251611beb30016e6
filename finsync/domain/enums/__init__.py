"""Domain enums.

Usage:
    from finsync.domain.enums import CategorySource, SyncState
"""

from finsync.domain.enums.aggregator_error_kind import (
    FatalErrorKind,
    TransientErrorKind,
)
from finsync.domain.enums.category_source import CategorySource
from finsync.domain.enums.reject_reason import RejectReason
from finsync.domain.enums.sync_state import (
    ALLOWED_TRANSITIONS,
    SyncState,
    SyncStatus,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "CategorySource",
    "FatalErrorKind",
    "RejectReason",
    "SyncState",
    "SyncStatus",
    "TransientErrorKind",
]
