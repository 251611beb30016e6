"""LoggerProtocol definition for structured logging.

Standardizes structured logging across finsync while staying
backend-agnostic. Implementations MUST emit structured (key-value) records.

Log Levels:
    - DEBUG: Detailed diagnostic info (per-record reconciliation)
    - INFO: Normal operational events (sync started/succeeded)
    - WARNING: Degraded service (retries, lock contention, fail-open)
    - ERROR: Operation failed, system continues (sync failed)
    - CRITICAL: System-wide failure

Usage:
    from finsync.core.container import get_logger

    logger = get_logger()
    run_logger = logger.bind(sync_run_id=str(run.id), account_id=str(account_id))
    run_logger.info("sync_started")
"""

from __future__ import annotations

from typing import Any, Protocol


class LoggerProtocol(Protocol):
    """Protocol for structured logging adapters.

    All logging calls MUST be structured: message + key-value context.
    """

    def debug(self, message: str, /, **context: Any) -> None:
        """Log a debug-level message."""
        ...

    def info(self, message: str, /, **context: Any) -> None:
        """Log an info-level message."""
        ...

    def warning(self, message: str, /, **context: Any) -> None:
        """Log a warning-level message."""
        ...

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log an error-level message with optional exception details.

        Args:
            message: Event name or human-readable message (use context for data).
            error: Optional exception instance; implementations add
                error_type and error_message fields.
            **context: Structured key-value context fields.
        """
        ...

    def critical(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log a critical-level message for catastrophic failures."""
        ...

    def bind(self, **context: Any) -> LoggerProtocol:
        """Return new logger with permanently bound context.

        Original logger instance remains unchanged.

        Example:
            run_logger = logger.bind(sync_run_id=str(run.id))
            run_logger.info("sync_fetching")  # sync_run_id included
        """
        ...
