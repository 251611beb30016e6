"""Transaction store protocol.

Defines the interface for transaction persistence used by the sync core.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol
from uuid import UUID

from finsync.core.result import Result
from finsync.domain.entities.transaction import Transaction
from finsync.domain.errors import StoreCommitError, StoreReadError, StoreWriteError
from finsync.domain.value_objects.commit_result import CommitResult
from finsync.domain.value_objects.merge_decision import WriteDecision


class TransactionStoreProtocol(Protocol):
    """Protocol for transaction persistence operations.

    **Design Principles**:
    - Read methods return domain entities, not database models
    - Reads on the sync path (find_by_external_id, get_last_synced_at)
      return Result so a failing backend fails the run instead of raising
    - (account_id, external_id) is unique; adapters enforce it
    - ``commit_batch`` is all-or-nothing: on Failure no row of the batch is
      visible to readers
    - Sync bookkeeping (last_synced_at per account) lives with the store so
      it can be read back on the next run
    """

    async def find_by_id(self, transaction_id: UUID) -> Transaction | None:
        """Find transaction by local ID.

        Args:
            transaction_id: Local transaction identifier.

        Returns:
            Transaction if found, None otherwise.
        """
        ...

    async def find_by_external_id(
        self,
        account_id: UUID,
        external_id: str,
    ) -> Result[Transaction | None, StoreReadError]:
        """Find transaction by its aggregator identifier.

        Used on the sync path, so backend failures come back as data.

        Args:
            account_id: Owning account.
            external_id: Aggregator transaction identifier.

        Returns:
            Success(Transaction) if found, Success(None) if not, or
            Failure(StoreReadError) when the lookup could not run.
        """
        ...

    async def find_by_account_id(self, account_id: UUID) -> list[Transaction]:
        """All transactions of an account, newest transaction_date first."""
        ...

    async def save(self, transaction: Transaction) -> Result[None, StoreWriteError]:
        """Insert or update a single transaction (user category commands).

        Args:
            transaction: Transaction to persist.

        Returns:
            Success(None) or Failure(StoreWriteError).
        """
        ...

    async def commit_batch(
        self,
        account_id: UUID,
        decisions: Sequence[WriteDecision],
    ) -> Result[CommitResult, StoreCommitError]:
        """Atomically apply CREATE and UPDATE decisions.

        Args:
            account_id: Account the batch belongs to.
            decisions: Write decisions in reconciliation order.

        Returns:
            Success(CommitResult) with counts, or Failure(StoreCommitError)
            when nothing was written.
        """
        ...

    async def get_last_synced_at(
        self, account_id: UUID
    ) -> Result[datetime | None, StoreReadError]:
        """When the account last completed a successful sync, if ever."""
        ...

    async def mark_synced(
        self,
        account_id: UUID,
        synced_at: datetime,
    ) -> Result[None, StoreWriteError]:
        """Record a successful sync for the account.

        Args:
            account_id: Account synced.
            synced_at: Start time of the successful run.

        Returns:
            Success(None) or Failure(StoreWriteError).
        """
        ...
