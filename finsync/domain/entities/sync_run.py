"""SyncRun domain entity.

Ephemeral record of one orchestration pass for a single account.
"""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from finsync.core.errors import DomainError
from finsync.domain.enums import ALLOWED_TRANSITIONS, SyncState, SyncStatus
from finsync.domain.errors import RecordRejectedError
from finsync.domain.value_objects.remote_transaction import AccountInfo


@dataclass(kw_only=True)
class SyncRun:
    """One execution of the sync state machine for an account.

    Created at orchestration start and returned to the caller when the run
    reaches a terminal state. Persisting it (e.g., as an audit row) is the
    caller's concern.

    State machine:
        PENDING -> LOCK_ACQUIRED -> FETCHING -> RECONCILING -> COMMITTING -> SUCCEEDED
        Any non-terminal state -> FAILED

    Attributes:
        id: Run identifier; also the owner token of the account lock.
        account_id: Account being synchronized.
        started_at: When the run was created.
        state: Current fine-grained state.
        fetched_count: Remote records fetched.
        created_count: Records created by the commit.
        updated_count: Records updated by the commit.
        unchanged_count: Records that needed no write.
        conflict_count: Records whose merge resolved at least one conflict.
        rejections: Per-record rejections (the run's error list).
        error: Run-level error when state is FAILED.
        account_info: Aggregator account metadata, once fetched.
        finished_at: When the run reached a terminal state.
    """

    id: UUID
    account_id: UUID
    started_at: datetime
    state: SyncState = SyncState.PENDING
    fetched_count: int = 0
    created_count: int = 0
    updated_count: int = 0
    unchanged_count: int = 0
    conflict_count: int = 0
    rejections: list[RecordRejectedError] = field(default_factory=list)
    error: DomainError | None = None
    account_info: AccountInfo | None = None
    finished_at: datetime | None = None

    @property
    def status(self) -> SyncStatus:
        """Coarse reporting status (RUNNING / SUCCEEDED / FAILED)."""
        return self.state.status

    @property
    def rejected_count(self) -> int:
        """Number of rejected remote records."""
        return len(self.rejections)

    def advance(self, to: SyncState, *, now: datetime | None = None) -> None:
        """Move the run to a new state.

        Args:
            to: Target state.
            now: Timestamp recorded as finished_at for terminal states.

        Raises:
            ValueError: If the transition is not part of the state machine.
        """
        if to not in ALLOWED_TRANSITIONS[self.state]:
            raise ValueError(
                f"illegal sync transition {self.state.value} -> {to.value}"
            )
        self.state = to
        if to.is_terminal:
            self.finished_at = now

    def fail(self, error: DomainError, *, now: datetime | None = None) -> None:
        """Move the run to FAILED and record the run-level error.

        Args:
            error: Why the run failed.
            now: Completion timestamp.
        """
        self.error = error
        self.advance(SyncState.FAILED, now=now)

    def reject(self, rejection: RecordRejectedError) -> None:
        """Record a per-record rejection without failing the run."""
        self.rejections.append(rejection)

    def summary(self) -> str:
        """Human-readable summary of the run counters."""
        message = (
            f"Fetched {self.fetched_count} transactions: "
            f"{self.created_count} created, {self.updated_count} updated, "
            f"{self.unchanged_count} unchanged, {self.conflict_count} conflicts"
        )
        if self.rejections:
            message += f", {self.rejected_count} rejected"
        return message
