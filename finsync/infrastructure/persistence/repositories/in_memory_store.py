"""In-memory implementation of TransactionStoreProtocol.

Backs single-process deployments without a database and the test suite.
Behaves like the SQLAlchemy store: unique (account_id, external_id),
all-or-nothing batch commits, user-owned fields preserved on sync updates
(including a category the user cleared while the sync was running).
"""

import asyncio
from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime
from typing import assert_never
from uuid import UUID

from finsync.core.enums import ErrorCode
from finsync.core.result import Failure, Result, Success
from finsync.domain.entities.transaction import Transaction
from finsync.domain.errors import StoreCommitError, StoreReadError, StoreWriteError
from finsync.domain.value_objects.commit_result import CommitResult
from finsync.domain.value_objects.merge_decision import (
    CreateDecision,
    UpdateDecision,
    WriteDecision,
)


class InMemoryTransactionStore:
    """Dict-backed transaction store.

    A batch is validated and applied to copies of the tables, which replace
    the live tables only when the whole batch succeeded.
    """

    def __init__(self) -> None:
        self._transactions: dict[UUID, Transaction] = {}
        self._by_external_id: dict[tuple[UUID, str], UUID] = {}
        self._last_synced: dict[UUID, datetime] = {}
        self._mutex = asyncio.Lock()

    async def find_by_id(self, transaction_id: UUID) -> Transaction | None:
        """Find transaction by ID."""
        return self._transactions.get(transaction_id)

    async def find_by_external_id(
        self,
        account_id: UUID,
        external_id: str,
    ) -> Result[Transaction | None, StoreReadError]:
        """Find transaction by (account_id, external_id)."""
        transaction_id = self._by_external_id.get((account_id, external_id))
        return Success(
            value=self._transactions.get(transaction_id) if transaction_id else None
        )

    async def find_by_account_id(self, account_id: UUID) -> list[Transaction]:
        """All transactions for an account, transaction_date DESC."""
        rows = [t for t in self._transactions.values() if t.account_id == account_id]
        rows.sort(key=lambda t: t.external_id)
        rows.sort(key=lambda t: t.transaction_date, reverse=True)
        return rows

    async def save(self, transaction: Transaction) -> Result[None, StoreWriteError]:
        """Insert or fully update one transaction."""
        async with self._mutex:
            key = (transaction.account_id, transaction.external_id)
            owner = self._by_external_id.get(key)
            if owner is not None and owner != transaction.id:
                return Failure(
                    error=StoreWriteError(
                        code=ErrorCode.STORE_WRITE_FAILED,
                        message="Duplicate (account_id, external_id)",
                        details={"external_id": transaction.external_id},
                    )
                )
            self._transactions[transaction.id] = transaction
            self._by_external_id[key] = transaction.id
        return Success(value=None)

    async def commit_batch(
        self,
        account_id: UUID,
        decisions: Sequence[WriteDecision],
    ) -> Result[CommitResult, StoreCommitError]:
        """Apply CREATE/UPDATE decisions all-or-nothing."""
        async with self._mutex:
            transactions = dict(self._transactions)
            by_external_id = dict(self._by_external_id)
            created = 0
            updated = 0

            for decision in decisions:
                match decision:
                    case CreateDecision(transaction=txn):
                        key = (txn.account_id, txn.external_id)
                        if key in by_external_id or txn.id in transactions:
                            return self._duplicate(decisions, txn)
                        created += 1
                    case UpdateDecision(transaction=txn):
                        key = (txn.account_id, txn.external_id)
                        owner = by_external_id.get(key)
                        if owner is not None and owner != txn.id:
                            return self._duplicate(decisions, txn)
                        current = transactions.get(txn.id)
                        if current is not None:
                            txn = _preserve_user_fields(txn, current)
                        updated += 1
                    case _:
                        assert_never(decision)
                transactions[txn.id] = txn
                by_external_id[key] = txn.id

            self._transactions = transactions
            self._by_external_id = by_external_id

        return Success(value=CommitResult(created=created, updated=updated))

    async def get_last_synced_at(
        self, account_id: UUID
    ) -> Result[datetime | None, StoreReadError]:
        """Last successful sync time of the account, if any."""
        return Success(value=self._last_synced.get(account_id))

    async def mark_synced(
        self,
        account_id: UUID,
        synced_at: datetime,
    ) -> Result[None, StoreWriteError]:
        """Record the account's last successful sync time."""
        self._last_synced[account_id] = synced_at
        return Success(value=None)

    @staticmethod
    def _duplicate(
        decisions: Sequence[WriteDecision], transaction: Transaction
    ) -> Failure[StoreCommitError]:
        return Failure(
            error=StoreCommitError(
                code=ErrorCode.STORE_COMMIT_FAILED,
                message="Batch commit failed: constraint violated",
                details={"external_id": transaction.external_id},
                batch_size=len(decisions),
            )
        )


def _preserve_user_fields(incoming: Transaction, current: Transaction) -> Transaction:
    # Sync writes never set a USER category; the stored one is authoritative.
    if current.is_user_categorized() or incoming.is_user_categorized():
        return replace(
            incoming,
            category=current.category,
            category_source=current.category_source,
            notes=current.notes,
        )
    return replace(incoming, notes=current.notes)
