"""Sync run error types.

Run-level errors end a sync run and are surfaced to callers through
``SyncRun.error`` (or, for lock contention, as the Failure of the handler).
"""

from dataclasses import dataclass
from uuid import UUID

from finsync.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class SyncAlreadyInProgressError(DomainError):
    """Another run holds the account sync lock.

    Not retried by the orchestrator; callers may try again later.

    Attributes:
        account_id: Account whose lock was held.
    """

    account_id: UUID


@dataclass(frozen=True, slots=True, kw_only=True)
class SyncCancelledError(DomainError):
    """The run was cancelled before it could commit.

    Attributes:
        state: State the run was in when cancelled.
    """

    state: str


@dataclass(frozen=True, slots=True, kw_only=True)
class SyncLockLostError(DomainError):
    """The run no longer held the account lock when it was about to commit.

    Attributes:
        account_id: Account whose lock expired or was taken over.
    """

    account_id: UUID


@dataclass(frozen=True, slots=True, kw_only=True)
class SyncUnexpectedError(DomainError):
    """An exception escaped a collaborator while the run was active.

    Attributes:
        error_type: Class name of the exception.
    """

    error_type: str
