"""Base domain event class.

Domain events represent things that happened in the sync core and are
always named in past tense (TransactionSyncSucceeded, not SyncTransactions).

Usage:
    >>> @dataclass(frozen=True, kw_only=True, slots=True)
    ... class TransactionSyncAttempted(DomainEvent):
    ...     account_id: UUID
    >>>
    >>> event = TransactionSyncAttempted(account_id=uuid7())
    >>> event.event_id  # auto-generated
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


@dataclass(frozen=True, kw_only=True, slots=True)
class DomainEvent:
    """Base class for all domain events.

    All domain events MUST:
        1. Inherit from this base class
        2. Use past tense naming
        3. Be frozen dataclasses (immutable after creation)
        4. Use kw_only=True

    Attributes:
        event_id: Unique identifier for this event instance.
        occurred_at: When the event occurred (UTC).
    """

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))
