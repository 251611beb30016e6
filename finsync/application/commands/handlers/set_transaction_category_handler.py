"""SetTransactionCategory command handler.

Applies a user category override. Once set, neither the classifier nor
remote data changes it; only ClearTransactionCategory does.
"""

from collections.abc import Callable
from datetime import UTC, datetime

from finsync.application.commands.category_commands import SetTransactionCategory
from finsync.core.constants import CATEGORY_MAX_LENGTH
from finsync.core.enums import ErrorCode
from finsync.core.errors import ValidationError
from finsync.core.result import Failure, Result, Success
from finsync.domain.entities.transaction import Transaction
from finsync.domain.errors import StoreWriteError, TransactionNotFoundError
from finsync.domain.events import TransactionCategoryChanged
from finsync.domain.protocols.event_bus_protocol import EventBusProtocol
from finsync.domain.protocols.logger_protocol import LoggerProtocol
from finsync.domain.protocols.transaction_store import TransactionStoreProtocol


class SetTransactionCategoryHandler:
    """Handler for SetTransactionCategory command.

    Dependencies (injected via constructor):
        - TransactionStoreProtocol: Lookup and single-record save
        - EventBusProtocol: TransactionCategoryChanged
        - LoggerProtocol: Structured logging
    """

    def __init__(
        self,
        store: TransactionStoreProtocol,
        event_bus: EventBusProtocol,
        logger: LoggerProtocol,
        *,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._store = store
        self._event_bus = event_bus
        self._logger = logger
        self._clock = clock

    async def handle(
        self, cmd: SetTransactionCategory
    ) -> Result[
        Transaction, ValidationError | TransactionNotFoundError | StoreWriteError
    ]:
        """Handle SetTransactionCategory command.

        Args:
            cmd: Command with transaction_id and category.

        Returns:
            Success(Transaction): Updated transaction (source USER).
            Failure(ValidationError): Empty or over-long category.
            Failure(TransactionNotFoundError): Unknown transaction.
            Failure(StoreWriteError): Save failed.
        """
        category = cmd.category.strip()
        if not category or len(category) > CATEGORY_MAX_LENGTH:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.INVALID_CATEGORY,
                    message=(
                        f"Category must be 1-{CATEGORY_MAX_LENGTH} characters"
                    ),
                    field="category",
                )
            )

        transaction = await self._store.find_by_id(cmd.transaction_id)
        if transaction is None:
            return Failure(
                error=TransactionNotFoundError(
                    code=ErrorCode.TRANSACTION_NOT_FOUND,
                    message="Transaction not found",
                    resource_type="Transaction",
                    resource_id=str(cmd.transaction_id),
                )
            )

        updated = transaction.with_user_category(category, self._clock())
        match await self._store.save(updated):
            case Failure(error=error):
                self._logger.error(
                    "transaction_category_save_failed",
                    transaction_id=str(cmd.transaction_id),
                    error_code=error.code.value,
                )
                return Failure(error=error)
            case Success():
                pass

        self._logger.info(
            "transaction_category_set",
            transaction_id=str(updated.id),
            old_category=transaction.category,
            new_category=updated.category,
        )
        await self._event_bus.publish(
            TransactionCategoryChanged(
                transaction_id=updated.id,
                account_id=updated.account_id,
                old_category=transaction.category,
                new_category=updated.category,
                category_source=updated.category_source.value,
            )
        )
        return Success(value=updated)
