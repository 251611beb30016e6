"""SyncAccounts command handler.

Fans a multi-account sync out to SyncAccountHandler. Runs for different
accounts proceed concurrently; the aggregator gate bounds how many requests
are actually in flight.
"""

import asyncio
from dataclasses import dataclass, field
from uuid import UUID

from finsync.application.commands.handlers.sync_account_handler import (
    SyncAccountHandler,
)
from finsync.application.commands.sync_commands import SyncAccount, SyncAccounts
from finsync.core.errors import ValidationError
from finsync.core.enums import ErrorCode
from finsync.core.result import Failure, Result, Success
from finsync.domain.entities.sync_run import SyncRun
from finsync.domain.enums import SyncStatus
from finsync.domain.protocols.logger_protocol import LoggerProtocol


@dataclass
class SyncAccountsResult:
    """Result of a multi-account sync.

    Attributes:
        runs: Terminal runs, in command order.
        skipped: Accounts whose lock was held by another run.
    """

    runs: list[SyncRun] = field(default_factory=list)
    skipped: list[UUID] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        """Number of runs that reached SUCCEEDED."""
        return sum(1 for run in self.runs if run.status == SyncStatus.SUCCEEDED)

    @property
    def failed(self) -> int:
        """Number of runs that reached FAILED."""
        return sum(1 for run in self.runs if run.status == SyncStatus.FAILED)

    @property
    def message(self) -> str:
        """Human-readable summary."""
        message = (
            f"Synced {len(self.runs)} accounts: "
            f"{self.succeeded} succeeded, {self.failed} failed"
        )
        if self.skipped:
            message += f", {len(self.skipped)} already in progress"
        return message


class SyncAccountsHandler:
    """Handler for SyncAccounts command.

    Returns:
        Result[SyncAccountsResult, ValidationError]: Failure only when the
        command names no accounts.
    """

    def __init__(self, sync_account: SyncAccountHandler, logger: LoggerProtocol) -> None:
        self._sync_account = sync_account
        self._logger = logger

    async def handle(
        self, command: SyncAccounts
    ) -> Result[SyncAccountsResult, ValidationError]:
        """Handle SyncAccounts command.

        Args:
            command: SyncAccounts command with account_ids.

        Returns:
            Success(SyncAccountsResult) or Failure(ValidationError).
        """
        account_ids = list(dict.fromkeys(command.account_ids))
        if not account_ids:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.VALIDATION_FAILED,
                    message="At least one account is required",
                    field="account_ids",
                )
            )

        results = await asyncio.gather(
            *(
                self._sync_account.handle(SyncAccount(account_id=account_id))
                for account_id in account_ids
            )
        )

        summary = SyncAccountsResult()
        for account_id, result in zip(account_ids, results, strict=True):
            match result:
                case Success(value=run):
                    summary.runs.append(run)
                case Failure():
                    summary.skipped.append(account_id)

        self._logger.info(
            "sync_accounts_completed",
            accounts=len(account_ids),
            succeeded=summary.succeeded,
            failed=summary.failed,
            skipped=len(summary.skipped),
        )
        return Success(value=summary)
