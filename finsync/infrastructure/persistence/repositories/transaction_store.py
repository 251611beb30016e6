"""SqlAlchemyTransactionStore - SQLAlchemy implementation of TransactionStoreProtocol.

Adapter for hexagonal architecture. Maps between domain Transaction entities
and TransactionModel rows, and keeps per-account sync bookkeeping in
AccountSyncStateModel.

Each public method runs in its own session from ``Database.get_session``;
``commit_batch`` writes the whole batch inside one transaction.
"""

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import assert_never
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from finsync.core.constants import ERROR_MESSAGE_MAX_LENGTH
from finsync.core.enums import ErrorCode
from finsync.core.result import Failure, Result, Success
from finsync.domain.entities.transaction import Transaction
from finsync.domain.enums import CategorySource
from finsync.domain.errors import StoreCommitError, StoreReadError, StoreWriteError
from finsync.domain.protocols.logger_protocol import LoggerProtocol
from finsync.domain.value_objects.commit_result import CommitResult
from finsync.domain.value_objects.merge_decision import (
    CreateDecision,
    UpdateDecision,
    WriteDecision,
)
from finsync.infrastructure.persistence.database import Database
from finsync.infrastructure.persistence.models.account_sync_state import (
    AccountSyncStateModel,
)
from finsync.infrastructure.persistence.models.transaction import TransactionModel


class SqlAlchemyTransactionStore:
    """SQLAlchemy implementation of TransactionStoreProtocol.

    This class does NOT inherit from the protocol (structural typing).

    User-owned data wins at write time: an UPDATE from a sync never
    overwrites ``notes`` or a category the row holds with source USER, and
    never writes back a USER category the user cleared while the sync was
    reconciling.

    Attributes:
        database: Session provider.
    """

    def __init__(self, database: Database, logger: LoggerProtocol) -> None:
        self.database = database
        self._logger = logger

    # =========================================================================
    # Reads
    # =========================================================================

    async def find_by_id(self, transaction_id: UUID) -> Transaction | None:
        """Find transaction by ID."""
        async with self.database.get_session() as session:
            model = await session.get(TransactionModel, transaction_id)
            return self._to_domain(model) if model is not None else None

    async def find_by_external_id(
        self,
        account_id: UUID,
        external_id: str,
    ) -> Result[Transaction | None, StoreReadError]:
        """Find transaction by (account_id, external_id)."""
        stmt = select(TransactionModel).where(
            TransactionModel.account_id == account_id,
            TransactionModel.external_id == external_id,
        )
        try:
            async with self.database.get_session() as session:
                result = await session.execute(stmt)
                model = result.scalar_one_or_none()
                return Success(
                    value=self._to_domain(model) if model is not None else None
                )
        except SQLAlchemyError as exc:
            return self._read_failed(
                "transaction_lookup_failed",
                exc,
                account_id=str(account_id),
                external_id=external_id,
            )

    async def find_by_account_id(self, account_id: UUID) -> list[Transaction]:
        """All transactions for an account, transaction_date DESC."""
        stmt = (
            select(TransactionModel)
            .where(TransactionModel.account_id == account_id)
            .order_by(
                TransactionModel.transaction_date.desc(),
                TransactionModel.external_id,
            )
        )
        async with self.database.get_session() as session:
            result = await session.execute(stmt)
            return [self._to_domain(model) for model in result.scalars().all()]

    async def get_last_synced_at(
        self, account_id: UUID
    ) -> Result[datetime | None, StoreReadError]:
        """Last successful sync time of the account, if any."""
        stmt = select(AccountSyncStateModel.last_synced_at).where(
            AccountSyncStateModel.account_id == account_id
        )
        try:
            async with self.database.get_session() as session:
                value = (await session.execute(stmt)).scalar_one_or_none()
                return Success(value=_as_utc(value) if value is not None else None)
        except SQLAlchemyError as exc:
            return self._read_failed(
                "account_sync_state_read_failed", exc, account_id=str(account_id)
            )

    # =========================================================================
    # Writes
    # =========================================================================

    async def save(self, transaction: Transaction) -> Result[None, StoreWriteError]:
        """Insert or fully update one transaction (user commands)."""
        try:
            async with self.database.get_session() as session:
                model = await session.get(TransactionModel, transaction.id)
                if model is None:
                    session.add(self._to_model(transaction))
                else:
                    self._apply(model, transaction, preserve_user_fields=False)
        except SQLAlchemyError as exc:
            self._logger.error(
                "transaction_save_failed",
                error=exc,
                transaction_id=str(transaction.id),
            )
            return Failure(
                error=StoreWriteError(
                    code=ErrorCode.STORE_WRITE_FAILED,
                    message="Failed to save transaction",
                    details={"error": str(exc)[:ERROR_MESSAGE_MAX_LENGTH]},
                )
            )
        return Success(value=None)

    async def commit_batch(
        self,
        account_id: UUID,
        decisions: Sequence[WriteDecision],
    ) -> Result[CommitResult, StoreCommitError]:
        """Apply CREATE/UPDATE decisions in one transaction.

        Returns:
            Success(CommitResult) or Failure(StoreCommitError) after a full
            rollback (unique violation, connection loss, ...).
        """
        created = 0
        updated = 0
        try:
            async with self.database.get_session() as session:
                for decision in decisions:
                    match decision:
                        case CreateDecision(transaction=txn):
                            session.add(self._to_model(txn))
                            created += 1
                        case UpdateDecision(transaction=txn):
                            model = await session.get(TransactionModel, txn.id)
                            if model is None:
                                session.add(self._to_model(txn))
                            else:
                                self._apply(model, txn, preserve_user_fields=True)
                            updated += 1
                        case _:
                            assert_never(decision)
                await session.flush()
        except IntegrityError as exc:
            return self._commit_failed(account_id, decisions, exc, "constraint violated")
        except SQLAlchemyError as exc:
            return self._commit_failed(account_id, decisions, exc, "database error")

        self._logger.debug(
            "transaction_batch_committed",
            account_id=str(account_id),
            created=created,
            updated=updated,
        )
        return Success(value=CommitResult(created=created, updated=updated))

    async def mark_synced(
        self,
        account_id: UUID,
        synced_at: datetime,
    ) -> Result[None, StoreWriteError]:
        """Upsert the account's last_synced_at."""
        stmt = select(AccountSyncStateModel).where(
            AccountSyncStateModel.account_id == account_id
        )
        try:
            async with self.database.get_session() as session:
                state = (await session.execute(stmt)).scalar_one_or_none()
                if state is None:
                    session.add(
                        AccountSyncStateModel(
                            account_id=account_id, last_synced_at=synced_at
                        )
                    )
                else:
                    state.last_synced_at = synced_at
        except SQLAlchemyError as exc:
            self._logger.error(
                "account_sync_state_write_failed",
                error=exc,
                account_id=str(account_id),
            )
            return Failure(
                error=StoreWriteError(
                    code=ErrorCode.STORE_WRITE_FAILED,
                    message="Failed to record sync time",
                    details={"error": str(exc)[:ERROR_MESSAGE_MAX_LENGTH]},
                )
            )
        return Success(value=None)

    # =========================================================================
    # Mapping
    # =========================================================================

    def _read_failed(
        self, event: str, exc: SQLAlchemyError, **context: str
    ) -> Failure[StoreReadError]:
        self._logger.error(event, error=exc, **context)
        return Failure(
            error=StoreReadError(
                code=ErrorCode.STORE_READ_FAILED,
                message="Transaction store read failed",
                details={"error": str(exc)[:ERROR_MESSAGE_MAX_LENGTH]},
            )
        )

    def _commit_failed(
        self,
        account_id: UUID,
        decisions: Sequence[WriteDecision],
        exc: SQLAlchemyError,
        reason: str,
    ) -> Failure[StoreCommitError]:
        self._logger.error(
            "transaction_batch_commit_failed",
            error=exc,
            account_id=str(account_id),
            batch_size=len(decisions),
        )
        return Failure(
            error=StoreCommitError(
                code=ErrorCode.STORE_COMMIT_FAILED,
                message=f"Batch commit failed: {reason}",
                details={"error": str(exc)[:ERROR_MESSAGE_MAX_LENGTH]},
                batch_size=len(decisions),
            )
        )

    @staticmethod
    def _apply(
        model: TransactionModel,
        transaction: Transaction,
        *,
        preserve_user_fields: bool,
    ) -> None:
        model.amount = transaction.amount
        model.currency = transaction.currency
        model.description = transaction.description
        model.merchant_name = transaction.merchant_name
        model.pending = transaction.pending
        model.transaction_date = transaction.transaction_date
        model.last_modified_at = transaction.last_modified_at
        model.last_synced_at = transaction.last_synced_at
        if preserve_user_fields:
            # A sync only writes a SYSTEM category over a SYSTEM row; a USER
            # category it carries may already have been cleared by the user.
            if (
                transaction.category_source is CategorySource.SYSTEM
                and model.category_source != CategorySource.USER.value
            ):
                model.category = transaction.category
                model.category_source = transaction.category_source.value
            return
        model.category = transaction.category
        model.category_source = transaction.category_source.value
        model.notes = transaction.notes

    @staticmethod
    def _to_model(transaction: Transaction) -> TransactionModel:
        return TransactionModel(
            id=transaction.id,
            account_id=transaction.account_id,
            external_id=transaction.external_id,
            amount=transaction.amount,
            currency=transaction.currency,
            description=transaction.description,
            merchant_name=transaction.merchant_name,
            pending=transaction.pending,
            transaction_date=transaction.transaction_date,
            category=transaction.category,
            category_source=transaction.category_source.value,
            notes=transaction.notes,
            last_modified_at=transaction.last_modified_at,
            last_synced_at=transaction.last_synced_at,
        )

    @staticmethod
    def _to_domain(model: TransactionModel) -> Transaction:
        return Transaction(
            id=model.id,
            external_id=model.external_id,
            account_id=model.account_id,
            amount=model.amount,
            description=model.description,
            merchant_name=model.merchant_name,
            pending=model.pending,
            transaction_date=model.transaction_date,
            currency=model.currency,
            category=model.category,
            category_source=CategorySource(model.category_source),
            notes=model.notes,
            last_modified_at=_as_utc(model.last_modified_at),
            last_synced_at=(
                _as_utc(model.last_synced_at) if model.last_synced_at else None
            ),
        )


def _as_utc(value: datetime) -> datetime:
    # SQLite returns naive datetimes; values are always written in UTC.
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value
