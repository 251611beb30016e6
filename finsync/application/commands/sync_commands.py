"""Sync commands for transaction synchronization.

Architecture:
    - Commands are immutable value objects representing intent
    - Handlers execute the sync and return results
    - Domain events published for observability
"""

from dataclasses import dataclass, field
from datetime import date
from uuid import UUID


@dataclass(frozen=True, kw_only=True)
class SyncAccount:
    """Command to sync transactions of one account.

    Attributes:
        account_id: Account to sync.
        since: Override the fetch window start. Defaults to the last
            successful sync date, or the default window on first sync.
    """

    account_id: UUID
    since: date | None = None


@dataclass(frozen=True, kw_only=True)
class SyncAccounts:
    """Command to sync several accounts concurrently.

    Attributes:
        account_ids: Accounts to sync. Duplicates are synced once.
    """

    account_ids: tuple[UUID, ...] = field(default_factory=tuple)
