"""Transaction sync domain events.

Pattern: 3 events per workflow (ATTEMPTED -> SUCCEEDED/FAILED)
- TransactionSyncAttempted: lock acquired, before any aggregator call
- TransactionSyncSucceeded: after the batch commit
- TransactionSyncFailed: after the run reached FAILED

Handlers:
- LoggingEventHandler: ALL 3 events
"""

from dataclasses import dataclass
from uuid import UUID

from finsync.domain.events.base_event import DomainEvent


@dataclass(frozen=True, kw_only=True)
class TransactionSyncAttempted(DomainEvent):
    """Transaction sync started for one account.

    Attributes:
        sync_run_id: Run identifier.
        account_id: Account being synced.
    """

    sync_run_id: UUID
    account_id: UUID


@dataclass(frozen=True, kw_only=True)
class TransactionSyncSucceeded(DomainEvent):
    """Transaction sync committed.

    Attributes:
        sync_run_id: Run identifier.
        account_id: Account synced.
        fetched_count: Remote records fetched.
        created_count: Records inserted.
        updated_count: Records updated.
        unchanged_count: Records needing no write.
        conflict_count: Records with at least one resolved conflict.
        rejected_count: Records rejected by validation.
    """

    sync_run_id: UUID
    account_id: UUID
    fetched_count: int
    created_count: int
    updated_count: int
    unchanged_count: int
    conflict_count: int
    rejected_count: int


@dataclass(frozen=True, kw_only=True)
class TransactionSyncFailed(DomainEvent):
    """Transaction sync failed.

    Attributes:
        sync_run_id: Run identifier.
        account_id: Account attempted.
        failed_state: State the run was in when it failed.
        error_code: ErrorCode value of the run-level error.
        reason: Human-readable failure reason.
    """

    sync_run_id: UUID
    account_id: UUID
    failed_state: str
    error_code: str
    reason: str


@dataclass(frozen=True, kw_only=True)
class TransactionCategoryChanged(DomainEvent):
    """User set or cleared a transaction category.

    Attributes:
        transaction_id: Transaction changed.
        account_id: Owning account.
        old_category: Category before the change.
        new_category: Category after the change.
        category_source: Source after the change (system or user).
    """

    transaction_id: UUID
    account_id: UUID
    old_category: str | None
    new_category: str | None
    category_source: str
