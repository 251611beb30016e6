"""In-process account lock table.

Implements AccountLockProtocol for single-process deployments and tests.
Entries carry an owner token and an expiry measured on a monotonic clock.
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass

from finsync.core.result import Result, Success
from finsync.domain.errors import LockServiceError


@dataclass(slots=True)
class _LockEntry:
    owner: str
    expires_at: float


class InMemoryAccountLock:
    """Keyed, owner-tagged, TTL-bounded lock table.

    All operations run under one asyncio.Lock, so acquisition is atomic
    with respect to other tasks on the same event loop. The table is always
    reachable, so no operation returns a Failure.

    Args:
        clock: Monotonic clock in seconds (injectable for tests).
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, _LockEntry] = {}
        self._mutex = asyncio.Lock()
        self._clock = clock

    async def try_acquire(
        self, key: str, *, owner: str, ttl_seconds: int
    ) -> Result[bool, LockServiceError]:
        """Acquire ``key`` for ``owner`` unless a live entry exists."""
        _check_ttl(ttl_seconds)
        async with self._mutex:
            now = self._clock()
            entry = self._entries.get(key)
            if entry is not None and entry.expires_at > now:
                return Success(value=False)
            self._entries[key] = _LockEntry(owner=owner, expires_at=now + ttl_seconds)
            return Success(value=True)

    async def extend(
        self, key: str, *, owner: str, ttl_seconds: int
    ) -> Result[bool, LockServiceError]:
        """Push back the expiry of a live entry held by ``owner``."""
        _check_ttl(ttl_seconds)
        async with self._mutex:
            now = self._clock()
            entry = self._entries.get(key)
            if entry is None or entry.owner != owner or entry.expires_at <= now:
                return Success(value=False)
            entry.expires_at = now + ttl_seconds
            return Success(value=True)

    async def release(self, key: str, *, owner: str) -> bool:
        """Remove the entry for ``key`` if ``owner`` holds it."""
        async with self._mutex:
            entry = self._entries.get(key)
            if entry is None or entry.owner != owner:
                return False
            del self._entries[key]
            return True

    async def is_locked(self, key: str) -> bool:
        """Whether a live entry exists for ``key``."""
        async with self._mutex:
            entry = self._entries.get(key)
            return entry is not None and entry.expires_at > self._clock()


def _check_ttl(ttl_seconds: int) -> None:
    if ttl_seconds <= 0:
        raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
