"""Redis-backed account lock.

Acquire is a single ``SET key owner NX PX ttl``; extend and release are Lua
compare-and-act scripts so a run never touches a lock that expired and was
taken over by another run.

Unlike the rate limiter, locks fail CLOSED: if Redis is unreachable,
acquire and extend return a LockServiceError and the caller must not
proceed as if it held the lock.
"""

from typing import Any

from redis.exceptions import RedisError

from finsync.core.constants import ERROR_MESSAGE_MAX_LENGTH
from finsync.core.enums import ErrorCode
from finsync.core.result import Failure, Result, Success
from finsync.domain.errors import LockServiceError
from finsync.domain.protocols.logger_protocol import LoggerProtocol

RELEASE_SCRIPT = """
if redis.call("GET", KEYS[1]) == ARGV[1] then
    return redis.call("DEL", KEYS[1])
end
return 0
"""

EXTEND_SCRIPT = """
if redis.call("GET", KEYS[1]) == ARGV[1] then
    return redis.call("PEXPIRE", KEYS[1], ARGV[2])
end
return 0
"""


class RedisAccountLock:
    """AccountLockProtocol adapter over redis.asyncio.

    Args:
        redis_client: Async Redis client (redis.asyncio.Redis compatible).
        logger: Structured logger.
    """

    def __init__(self, *, redis_client: Any, logger: LoggerProtocol) -> None:
        self.redis = redis_client
        self._logger = logger
        self._release = redis_client.register_script(RELEASE_SCRIPT)
        self._extend = redis_client.register_script(EXTEND_SCRIPT)

    async def try_acquire(
        self, key: str, *, owner: str, ttl_seconds: int
    ) -> Result[bool, LockServiceError]:
        """Acquire ``key`` for ``owner`` with ``SET NX PX``."""
        _check_ttl(ttl_seconds)
        try:
            acquired = await self.redis.set(key, owner, nx=True, px=ttl_seconds * 1000)
        except RedisError as exc:
            return self._unavailable("account_lock_acquire_failed", key, exc)
        return Success(value=bool(acquired))

    async def extend(
        self, key: str, *, owner: str, ttl_seconds: int
    ) -> Result[bool, LockServiceError]:
        """Reset the TTL of ``key`` only if its value is still ``owner``."""
        _check_ttl(ttl_seconds)
        try:
            extended = await self._extend(keys=[key], args=[owner, ttl_seconds * 1000])
        except RedisError as exc:
            return self._unavailable("account_lock_extend_failed", key, exc)
        return Success(value=bool(extended))

    async def release(self, key: str, *, owner: str) -> bool:
        """Delete ``key`` only if its value is still ``owner``."""
        try:
            deleted = await self._release(keys=[key], args=[owner])
        except RedisError as exc:
            # The entry still expires after its TTL.
            self._logger.warning(
                "account_lock_release_failed",
                lock_key=key,
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
            return False
        return bool(deleted)

    async def is_locked(self, key: str) -> bool:
        """Whether ``key`` currently exists."""
        try:
            return bool(await self.redis.exists(key))
        except RedisError:
            return False

    def _unavailable(
        self, event: str, key: str, exc: RedisError
    ) -> Failure[LockServiceError]:
        self._logger.warning(
            event,
            lock_key=key,
            error_type=type(exc).__name__,
            error_message=str(exc),
        )
        return Failure(
            error=LockServiceError(
                code=ErrorCode.LOCK_SERVICE_UNAVAILABLE,
                message="Lock service unavailable",
                details={"error": str(exc)[:ERROR_MESSAGE_MAX_LENGTH]},
                lock_key=key,
            )
        )


def _check_ttl(ttl_seconds: int) -> None:
    if ttl_seconds <= 0:
        raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
