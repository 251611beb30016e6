"""ClearTransactionCategory command handler.

Drops a user override: the source goes back to SYSTEM and the classifier
assigns a fresh label. Clearing a transaction that has no override is a
no-op and succeeds.
"""

from collections.abc import Callable
from datetime import UTC, datetime

from finsync.application.commands.category_commands import ClearTransactionCategory
from finsync.application.services.category_classifier import CategoryClassifier
from finsync.core.enums import ErrorCode
from finsync.core.result import Failure, Result, Success
from finsync.domain.entities.transaction import Transaction
from finsync.domain.errors import StoreWriteError, TransactionNotFoundError
from finsync.domain.events import TransactionCategoryChanged
from finsync.domain.protocols.event_bus_protocol import EventBusProtocol
from finsync.domain.protocols.logger_protocol import LoggerProtocol
from finsync.domain.protocols.transaction_store import TransactionStoreProtocol


class ClearTransactionCategoryHandler:
    """Handler for ClearTransactionCategory command."""

    def __init__(
        self,
        store: TransactionStoreProtocol,
        classifier: CategoryClassifier,
        event_bus: EventBusProtocol,
        logger: LoggerProtocol,
        *,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._store = store
        self._classifier = classifier
        self._event_bus = event_bus
        self._logger = logger
        self._clock = clock

    async def handle(
        self, cmd: ClearTransactionCategory
    ) -> Result[Transaction, TransactionNotFoundError | StoreWriteError]:
        """Handle ClearTransactionCategory command.

        Args:
            cmd: Command with transaction_id.

        Returns:
            Success(Transaction): Transaction with a SYSTEM category.
            Failure(TransactionNotFoundError): Unknown transaction.
            Failure(StoreWriteError): Save failed.
        """
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

        if not transaction.is_user_categorized():
            return Success(value=transaction)

        cleared = transaction.without_user_category(self._clock())
        updated = cleared.with_system_category(self._classifier.classify(cleared))

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
            "transaction_category_cleared",
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
