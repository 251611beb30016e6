"""Logging event handler for domain events.

Structured logging for the sync and category events.

Log Levels:
    - INFO: ATTEMPTED and SUCCEEDED events, category changes
    - WARNING: FAILED events

Usage:
    >>> handler = LoggingEventHandler(logger=get_logger())
    >>> handler.register(event_bus)
"""

from finsync.domain.events import (
    TransactionCategoryChanged,
    TransactionSyncAttempted,
    TransactionSyncFailed,
    TransactionSyncSucceeded,
)
from finsync.domain.protocols.event_bus_protocol import EventBusProtocol
from finsync.domain.protocols.logger_protocol import LoggerProtocol


class LoggingEventHandler:
    """Event handler for structured logging of domain events.

    Attributes:
        _logger: Logger protocol implementation (from container).
    """

    def __init__(self, logger: LoggerProtocol) -> None:
        self._logger = logger

    def register(self, event_bus: EventBusProtocol) -> None:
        """Subscribe every handler method to its event type."""
        event_bus.subscribe(TransactionSyncAttempted, self.handle_sync_attempted)  # type: ignore[arg-type]
        event_bus.subscribe(TransactionSyncSucceeded, self.handle_sync_succeeded)  # type: ignore[arg-type]
        event_bus.subscribe(TransactionSyncFailed, self.handle_sync_failed)  # type: ignore[arg-type]
        event_bus.subscribe(TransactionCategoryChanged, self.handle_category_changed)  # type: ignore[arg-type]

    # =========================================================================
    # Transaction Sync Event Handlers
    # =========================================================================

    async def handle_sync_attempted(self, event: TransactionSyncAttempted) -> None:
        """Log sync attempt (INFO level)."""
        self._logger.info(
            "transaction_sync_attempted",
            event_id=str(event.event_id),
            occurred_at=event.occurred_at.isoformat(),
            sync_run_id=str(event.sync_run_id),
            account_id=str(event.account_id),
        )

    async def handle_sync_succeeded(self, event: TransactionSyncSucceeded) -> None:
        """Log successful sync with its counters (INFO level)."""
        self._logger.info(
            "transaction_sync_succeeded",
            event_id=str(event.event_id),
            occurred_at=event.occurred_at.isoformat(),
            sync_run_id=str(event.sync_run_id),
            account_id=str(event.account_id),
            fetched_count=event.fetched_count,
            created_count=event.created_count,
            updated_count=event.updated_count,
            unchanged_count=event.unchanged_count,
            conflict_count=event.conflict_count,
            rejected_count=event.rejected_count,
        )

    async def handle_sync_failed(self, event: TransactionSyncFailed) -> None:
        """Log failed sync (WARNING level)."""
        self._logger.warning(
            "transaction_sync_failed",
            event_id=str(event.event_id),
            occurred_at=event.occurred_at.isoformat(),
            sync_run_id=str(event.sync_run_id),
            account_id=str(event.account_id),
            failed_state=event.failed_state,
            error_code=event.error_code,
            reason=event.reason,
        )

    # =========================================================================
    # Category Event Handlers
    # =========================================================================

    async def handle_category_changed(self, event: TransactionCategoryChanged) -> None:
        """Log a user category change (INFO level)."""
        self._logger.info(
            "transaction_category_changed",
            event_id=str(event.event_id),
            transaction_id=str(event.transaction_id),
            account_id=str(event.account_id),
            old_category=event.old_category,
            new_category=event.new_category,
            category_source=event.category_source,
        )
