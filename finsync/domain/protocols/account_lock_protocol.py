"""Account lock protocol (port).

Keyed, owner-tagged, non-blocking mutual exclusion. The sync orchestrator
uses it so at most one run per account is active at a time, across tasks
(in-memory adapter) or across processes (Redis adapter).

Usage:
    match await lock.try_acquire(key, owner=str(run.id), ttl_seconds=300):
        case Failure(error=error):
            ...  # lock backend unreachable
        case Success(value=False):
            ...  # held by another run
        case Success():
            pass
    try:
        ...  # extend() periodically while the work runs
    finally:
        await lock.release(key, owner=str(run.id))
"""

from typing import Protocol

from finsync.core.result import Result
from finsync.domain.errors import LockServiceError


class AccountLockProtocol(Protocol):
    """Protocol for keyed lock services.

    Contract:
        - try_acquire never waits: it returns Success(False) when another
          owner holds a live entry for the key, and Failure only when the
          backend cannot answer.
        - An entry expires after ttl_seconds so a crashed owner cannot block
          the key forever. Live owners keep it with extend().
        - extend and release only act when ``owner`` still holds the entry.
    """

    async def try_acquire(
        self, key: str, *, owner: str, ttl_seconds: int
    ) -> Result[bool, LockServiceError]:
        """Acquire the lock for ``key`` if it is free.

        Args:
            key: Lock key (e.g. ``sync_lock:account:<uuid>``).
            owner: Opaque owner token.
            ttl_seconds: Expiry of the entry.

        Returns:
            Success(True) if acquired, Success(False) if held by someone
            else, Failure(LockServiceError) if the backend is unreachable.
        """
        ...

    async def extend(
        self, key: str, *, owner: str, ttl_seconds: int
    ) -> Result[bool, LockServiceError]:
        """Reset the expiry of an entry ``owner`` still holds.

        Returns:
            Success(True) if renewed, Success(False) if the entry expired or
            belongs to another owner, Failure(LockServiceError) if the
            backend is unreachable.
        """
        ...

    async def release(self, key: str, *, owner: str) -> bool:
        """Release the lock if ``owner`` still holds it.

        Returns:
            True if an entry was removed, False otherwise.
        """
        ...

    async def is_locked(self, key: str) -> bool:
        """Whether a live entry exists for ``key``."""
        ...
