"""Domain events.

Usage:
    from finsync.domain.events import DomainEvent, TransactionSyncSucceeded
"""

from finsync.domain.events.base_event import DomainEvent
from finsync.domain.events.sync_events import (
    TransactionCategoryChanged,
    TransactionSyncAttempted,
    TransactionSyncFailed,
    TransactionSyncSucceeded,
)

__all__ = [
    "DomainEvent",
    "TransactionCategoryChanged",
    "TransactionSyncAttempted",
    "TransactionSyncFailed",
    "TransactionSyncSucceeded",
]
