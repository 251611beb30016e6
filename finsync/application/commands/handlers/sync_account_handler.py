"""SyncAccount command handler (sync orchestrator).

Drives one account through the sync state machine:

    PENDING -> LOCK_ACQUIRED -> FETCHING -> RECONCILING -> COMMITTING -> SUCCEEDED
    any non-terminal state -> FAILED

Architecture:
    - Application layer handler (orchestrates ports, owns no I/O itself)
    - Per-account exclusivity via AccountLockProtocol (non-blocking), renewed
      by a heartbeat while the run is live and re-checked before commit
    - Transient aggregator failures are retried at the aggregator boundary
      (ResilientAggregatorClient); failures reaching this handler are final
    - All writes go through a single atomic commit_batch
    - Attempted/Succeeded/Failed domain events published on the event bus
"""

import asyncio
from collections.abc import Callable
from contextlib import suppress
from datetime import UTC, date, datetime, timedelta
from typing import assert_never
from uuid import UUID

from uuid_extensions import uuid7

from finsync.application.commands.sync_commands import SyncAccount
from finsync.application.services.category_classifier import CategoryClassifier
from finsync.application.services.conflict_resolver import ConflictResolver
from finsync.core.constants import ACCOUNT_SYNC_LOCK_PREFIX, ERROR_MESSAGE_MAX_LENGTH
from finsync.core.enums import ErrorCode
from finsync.core.errors import DomainError
from finsync.core.result import Failure, Result, Success
from finsync.domain.entities.sync_run import SyncRun
from finsync.domain.entities.transaction import Transaction
from finsync.domain.enums import FatalErrorKind, SyncState
from finsync.domain.errors import (
    AggregatorFatalError,
    RecordRejectedError,
    SyncAlreadyInProgressError,
    SyncCancelledError,
    SyncLockLostError,
    SyncUnexpectedError,
)
from finsync.domain.events import (
    TransactionSyncAttempted,
    TransactionSyncFailed,
    TransactionSyncSucceeded,
)
from finsync.domain.protocols.account_lock_protocol import AccountLockProtocol
from finsync.domain.protocols.aggregator_protocol import AggregatorProtocol
from finsync.domain.protocols.event_bus_protocol import EventBusProtocol
from finsync.domain.protocols.logger_protocol import LoggerProtocol
from finsync.domain.protocols.transaction_store import TransactionStoreProtocol
from finsync.domain.value_objects.merge_decision import (
    CreateDecision,
    NoOpDecision,
    RejectDecision,
    UpdateDecision,
    WriteDecision,
)
from finsync.domain.value_objects.remote_transaction import RemoteTransactionSnapshot

# Default fetch window on first sync (30 days)
DEFAULT_SYNC_WINDOW_DAYS = 30


def _utc_now() -> datetime:
    return datetime.now(UTC)


def account_lock_key(account_id: UUID) -> str:
    """Lock key guarding syncs of ``account_id``."""
    return f"{ACCOUNT_SYNC_LOCK_PREFIX}{account_id}"


class SyncAccountHandler:
    """Handler for SyncAccount command.

    Flow:
        1. Acquire the account lock (fail fast if another run holds it)
        2. Fetch account metadata (inactive account is fatal)
        3. Fetch all transaction pages since the window start
        4. Collapse duplicate external ids (last occurrence wins)
        5. Reconcile each record against the store; classify where needed
        6. Confirm the lock is still held, then commit CREATE/UPDATE
           decisions in one atomic batch
        7. Record the sync time and release the lock

    Dependencies (injected via constructor):
        - AggregatorProtocol: Usually a ResilientAggregatorClient
        - TransactionStoreProtocol: Lookups, atomic commit, sync bookkeeping
        - AccountLockProtocol: Per-account exclusivity
        - ConflictResolver / CategoryClassifier: Pure decision services
        - EventBusProtocol: Domain events
        - LoggerProtocol: Structured logging

    Returns:
        Result[SyncRun, SyncAlreadyInProgressError]: Success carries the
        terminal run (SUCCEEDED or FAILED, see ``run.error``). Failure only
        when the account lock was already held.
    """

    def __init__(
        self,
        aggregator: AggregatorProtocol,
        store: TransactionStoreProtocol,
        lock: AccountLockProtocol,
        resolver: ConflictResolver,
        classifier: CategoryClassifier,
        event_bus: EventBusProtocol,
        logger: LoggerProtocol,
        *,
        lock_ttl_seconds: int = 300,
        lock_renew_interval_seconds: float | None = None,
        default_window_days: int = DEFAULT_SYNC_WINDOW_DAYS,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize handler with dependencies.

        Args:
            aggregator: Aggregator client.
            store: Transaction store.
            lock: Account lock service.
            resolver: Conflict resolver.
            classifier: Category classifier.
            event_bus: For publishing domain events.
            logger: Structured logger.
            lock_ttl_seconds: Expiry of the account lock entry.
            lock_renew_interval_seconds: Heartbeat period for extending the
                lock. Defaults to a third of the TTL.
            default_window_days: Fetch window on first sync.
            clock: Returns the current UTC time.

        Raises:
            ValueError: If the renew interval is not shorter than the TTL.
        """
        renew_interval = (
            lock_renew_interval_seconds
            if lock_renew_interval_seconds is not None
            else lock_ttl_seconds / 3
        )
        if not 0 < renew_interval < lock_ttl_seconds:
            raise ValueError(
                "lock_renew_interval_seconds must be positive and below "
                f"lock_ttl_seconds, got {renew_interval}"
            )
        self._aggregator = aggregator
        self._store = store
        self._lock = lock
        self._resolver = resolver
        self._classifier = classifier
        self._event_bus = event_bus
        self._logger = logger
        self._lock_ttl_seconds = lock_ttl_seconds
        self._lock_renew_interval = renew_interval
        self._default_window_days = default_window_days
        self._clock = clock

    async def handle(
        self, command: SyncAccount
    ) -> Result[SyncRun, SyncAlreadyInProgressError]:
        """Handle SyncAccount command.

        Args:
            command: SyncAccount command with account_id.

        Returns:
            Success(SyncRun): Run reached SUCCEEDED or FAILED. An unreachable
                lock service fails the run with LOCK_SERVICE_UNAVAILABLE.
            Failure(SyncAlreadyInProgressError): Another run holds the lock.

        Raises:
            asyncio.CancelledError: If cancelled. A run cancelled before
                COMMITTING is marked FAILED and nothing is written; a commit
                in flight completes first.
        """
        run = SyncRun(id=uuid7(), account_id=command.account_id, started_at=self._clock())
        log = self._logger.bind(
            sync_run_id=str(run.id), account_id=str(command.account_id)
        )
        key = account_lock_key(command.account_id)
        owner = str(run.id)

        match await self._lock.try_acquire(
            key, owner=owner, ttl_seconds=self._lock_ttl_seconds
        ):
            case Failure(error=error):
                await self._fail(run, error, log)
                return Success(value=run)
            case Success(value=False):
                log.warning("sync_already_in_progress")
                return Failure(
                    error=SyncAlreadyInProgressError(
                        code=ErrorCode.SYNC_ALREADY_IN_PROGRESS,
                        message="A sync is already running for this account",
                        account_id=command.account_id,
                    )
                )
            case Success():
                pass

        heartbeat = asyncio.create_task(self._renew_lock(key, owner, log))
        try:
            run.advance(SyncState.LOCK_ACQUIRED)
            log.info("sync_started")
            await self._event_bus.publish(
                TransactionSyncAttempted(sync_run_id=run.id, account_id=run.account_id)
            )
            await self._execute(run, command, log)
        except asyncio.CancelledError:
            if not run.state.is_terminal:
                await self._fail(
                    run,
                    SyncCancelledError(
                        code=ErrorCode.SYNC_CANCELLED,
                        message="Sync cancelled before commit",
                        state=run.state.value,
                    ),
                    log,
                )
            raise
        except Exception as exc:
            log.error("sync_unexpected_error", error=exc, state=run.state.value)
            if not run.state.is_terminal:
                await self._fail(
                    run,
                    SyncUnexpectedError(
                        code=ErrorCode.SYNC_UNEXPECTED_ERROR,
                        message="Unexpected error during sync",
                        details={"error": str(exc)[:ERROR_MESSAGE_MAX_LENGTH]},
                        error_type=type(exc).__name__,
                    ),
                    log,
                )
        finally:
            heartbeat.cancel()
            with suppress(asyncio.CancelledError):
                await heartbeat
            released = await self._lock.release(key, owner=owner)
            if not released:
                log.warning("sync_lock_release_skipped", lock_key=key)

        return Success(value=run)

    # =========================================================================
    # Lock lifetime
    # =========================================================================

    async def _renew_lock(self, key: str, owner: str, log: LoggerProtocol) -> None:
        """Extend the lock every renew interval until cancelled or lost."""
        while True:
            await asyncio.sleep(self._lock_renew_interval)
            match await self._lock.extend(
                key, owner=owner, ttl_seconds=self._lock_ttl_seconds
            ):
                case Success(value=True):
                    log.debug("sync_lock_renewed", lock_key=key)
                case Success(value=False):
                    log.error("sync_lock_lost", lock_key=key)
                    return
                case Failure(error=error):
                    # Retried on the next beat; the pre-commit check decides.
                    log.warning(
                        "sync_lock_renew_failed",
                        lock_key=key,
                        error_code=error.code.value,
                    )

    async def _still_holds_lock(self, run: SyncRun, log: LoggerProtocol) -> bool:
        """Renew the lock right before commit; fail the run if it is gone."""
        match await self._lock.extend(
            account_lock_key(run.account_id),
            owner=str(run.id),
            ttl_seconds=self._lock_ttl_seconds,
        ):
            case Success(value=True):
                return True
            case Success(value=False):
                await self._fail(
                    run,
                    SyncLockLostError(
                        code=ErrorCode.SYNC_LOCK_LOST,
                        message="Account lock expired or was taken over before commit",
                        account_id=run.account_id,
                    ),
                    log,
                )
            case Failure(error=error):
                await self._fail(run, error, log)
        return False

    # =========================================================================
    # State machine steps
    # =========================================================================

    async def _execute(
        self, run: SyncRun, command: SyncAccount, log: LoggerProtocol
    ) -> None:
        run.advance(SyncState.FETCHING)
        records = await self._fetch(run, command, log)
        if records is None:
            return

        run.fetched_count = len(records)
        run.advance(SyncState.RECONCILING)
        decisions = await self._reconcile(run, records, log)
        if decisions is None or not await self._still_holds_lock(run, log):
            return

        run.advance(SyncState.COMMITTING)
        commit = asyncio.ensure_future(self._commit(run, decisions, log))
        try:
            await asyncio.shield(commit)
        except asyncio.CancelledError:
            # Let the commit finish so the run ends in a terminal state.
            await commit
            raise

    async def _fetch(
        self, run: SyncRun, command: SyncAccount, log: LoggerProtocol
    ) -> list[RemoteTransactionSnapshot] | None:
        """Fetch metadata and every page; None when the run failed."""
        match await self._aggregator.fetch_account_metadata(run.account_id):
            case Failure(error=error):
                await self._fail(run, error, log)
                return None
            case Success(value=info):
                run.account_info = info

        if not info.is_active:
            await self._fail(
                run,
                AggregatorFatalError(
                    code=ErrorCode.AGGREGATOR_INVALID_ACCOUNT,
                    message="Account is no longer active at the institution",
                    kind=FatalErrorKind.INVALID_ACCOUNT,
                ),
                log,
            )
            return None

        since = command.since
        if since is None:
            match await self._store.get_last_synced_at(run.account_id):
                case Failure(error=error):
                    await self._fail(run, error, log)
                    return None
                case Success(value=last_synced_at):
                    since = self._window_start(last_synced_at)
        log.info("sync_fetching", since=since.isoformat())

        records: list[RemoteTransactionSnapshot] = []
        page_token: str | None = None
        pages = 0
        while True:
            match await self._aggregator.fetch_transactions(
                run.account_id, since=since, page_token=page_token
            ):
                case Failure(error=error):
                    await self._fail(run, error, log)
                    return None
                case Success(value=page):
                    records.extend(page.records)
                    pages += 1
            if page.next_page_token is None:
                break
            page_token = page.next_page_token

        log.info("sync_fetched", pages=pages, records=len(records))
        return records

    def _window_start(self, last_synced_at: datetime | None) -> date:
        if last_synced_at is not None:
            return last_synced_at.date()
        return self._clock().date() - timedelta(days=self._default_window_days)

    async def _reconcile(
        self,
        run: SyncRun,
        records: list[RemoteTransactionSnapshot],
        log: LoggerProtocol,
    ) -> list[WriteDecision] | None:
        """Merge records in fetch order and collect the writes.

        Returns None when a store lookup failed (the run is FAILED).
        """
        now = self._clock()
        decisions: list[WriteDecision] = []

        for remote in _collapse_duplicates(records):
            external_id = (remote.external_id or "").strip()
            local: Transaction | None = None
            if external_id:
                match await self._store.find_by_external_id(
                    run.account_id, external_id
                ):
                    case Failure(error=error):
                        await self._fail(run, error, log)
                        return None
                    case Success(value=found):
                        local = found
            decision = self._resolver.merge(
                local, remote, now=now, account_id=run.account_id
            )
            match decision:
                case CreateDecision(transaction=txn):
                    decisions.append(decision.with_transaction(self._classified(txn)))
                case UpdateDecision(transaction=txn):
                    if decision.has_conflicts:
                        run.conflict_count += 1
                        log.info(
                            "sync_conflict_resolved",
                            external_id=external_id,
                            fields=[c.field for c in decision.conflicts],
                        )
                    decisions.append(decision.with_transaction(self._classified(txn)))
                case NoOpDecision():
                    run.unchanged_count += 1
                    if decision.has_conflicts:
                        run.conflict_count += 1
                case RejectDecision(reason=reason, message=message):
                    run.reject(
                        RecordRejectedError(
                            code=ErrorCode.RECORD_REJECTED,
                            message=message,
                            external_id=decision.external_id,
                            reason=reason,
                        )
                    )
                    log.warning(
                        "sync_record_rejected",
                        external_id=decision.external_id,
                        reason=reason.value,
                    )
                case _:
                    assert_never(decision)

        return decisions

    def _classified(self, transaction: Transaction) -> Transaction:
        if not transaction.needs_classification():
            return transaction
        return transaction.with_system_category(self._classifier.classify(transaction))

    async def _commit(
        self, run: SyncRun, decisions: list[WriteDecision], log: LoggerProtocol
    ) -> None:
        if decisions:
            match await self._store.commit_batch(run.account_id, decisions):
                case Failure(error=error):
                    await self._fail(run, error, log)
                    return
                case Success(value=result):
                    run.created_count = result.created
                    run.updated_count = result.updated

        match await self._store.mark_synced(run.account_id, run.started_at):
            case Failure(error=error):
                # Rows are committed; the next run just refetches the window.
                log.warning("sync_state_update_failed", error_code=error.code.value)
            case Success():
                pass

        run.advance(SyncState.SUCCEEDED, now=self._clock())
        log.info(
            "sync_succeeded",
            fetched=run.fetched_count,
            created=run.created_count,
            updated=run.updated_count,
            unchanged=run.unchanged_count,
            conflicts=run.conflict_count,
            rejected=run.rejected_count,
        )
        await self._event_bus.publish(
            TransactionSyncSucceeded(
                sync_run_id=run.id,
                account_id=run.account_id,
                fetched_count=run.fetched_count,
                created_count=run.created_count,
                updated_count=run.updated_count,
                unchanged_count=run.unchanged_count,
                conflict_count=run.conflict_count,
                rejected_count=run.rejected_count,
            )
        )

    async def _fail(self, run: SyncRun, error: DomainError, log: LoggerProtocol) -> None:
        failed_state = run.state
        run.fail(error, now=self._clock())
        log.error(
            "sync_failed",
            failed_state=failed_state.value,
            error_code=error.code.value,
            error_message=error.message,
        )
        await self._event_bus.publish(
            TransactionSyncFailed(
                sync_run_id=run.id,
                account_id=run.account_id,
                failed_state=failed_state.value,
                error_code=error.code.value,
                reason=error.message,
            )
        )


def _collapse_duplicates(
    records: list[RemoteTransactionSnapshot],
) -> list[RemoteTransactionSnapshot]:
    """Keep the last occurrence of each external id, in first-seen order.

    Records without an external id are kept as-is (the resolver rejects them).
    """
    latest: dict[str, RemoteTransactionSnapshot] = {}
    anonymous: list[RemoteTransactionSnapshot] = []
    for record in records:
        external_id = (record.external_id or "").strip()
        if external_id:
            latest[external_id] = record
        else:
            anonymous.append(record)
    return [*latest.values(), *anonymous]
