"""Sync run state machine enums.

SyncState is the fine-grained state of one run; SyncStatus is the coarse
reporting status exposed to callers.

State machine:
    PENDING -> LOCK_ACQUIRED -> FETCHING -> RECONCILING -> COMMITTING -> SUCCEEDED
    FAILED is reachable from every non-terminal state.
"""

from enum import Enum


class SyncStatus(str, Enum):
    """Coarse run status reported to callers."""

    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SyncState(str, Enum):
    """Fine-grained run state."""

    PENDING = "pending"
    LOCK_ACQUIRED = "lock_acquired"
    FETCHING = "fetching"
    RECONCILING = "reconciling"
    COMMITTING = "committing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transitions are allowed."""
        return self in (SyncState.SUCCEEDED, SyncState.FAILED)

    @property
    def status(self) -> SyncStatus:
        """Map state to reporting status."""
        if self == SyncState.SUCCEEDED:
            return SyncStatus.SUCCEEDED
        if self == SyncState.FAILED:
            return SyncStatus.FAILED
        return SyncStatus.RUNNING


ALLOWED_TRANSITIONS: dict[SyncState, frozenset[SyncState]] = {
    SyncState.PENDING: frozenset({SyncState.LOCK_ACQUIRED, SyncState.FAILED}),
    SyncState.LOCK_ACQUIRED: frozenset({SyncState.FETCHING, SyncState.FAILED}),
    SyncState.FETCHING: frozenset({SyncState.RECONCILING, SyncState.FAILED}),
    SyncState.RECONCILING: frozenset({SyncState.COMMITTING, SyncState.FAILED}),
    SyncState.COMMITTING: frozenset({SyncState.SUCCEEDED, SyncState.FAILED}),
    SyncState.SUCCEEDED: frozenset(),
    SyncState.FAILED: frozenset(),
}
