"""Unit tests for the account lock adapters.

InMemoryAccountLock is exercised directly with a fake clock.
RedisAccountLock is exercised against a mocked redis.asyncio client.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from finsync.core.enums import ErrorCode
from finsync.core.result import Failure, Success
from finsync.domain.errors import LockServiceError
from finsync.infrastructure.locks.in_memory_lock import InMemoryAccountLock
from finsync.infrastructure.locks.redis_lock import (
    EXTEND_SCRIPT,
    RELEASE_SCRIPT,
    RedisAccountLock,
)

HELD = Success(value=True)
REFUSED = Success(value=False)


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def lock(clock) -> InMemoryAccountLock:
    return InMemoryAccountLock(clock=clock)


@pytest.fixture
def mock_redis():
    """Mock redis.asyncio client with registered release/extend scripts."""
    redis = MagicMock()
    redis.set = AsyncMock(return_value=True)
    redis.exists = AsyncMock(return_value=1)
    redis.release_script = AsyncMock(return_value=1)
    redis.extend_script = AsyncMock(return_value=1)
    scripts = {RELEASE_SCRIPT: redis.release_script, EXTEND_SCRIPT: redis.extend_script}
    redis.register_script.side_effect = scripts.__getitem__
    return redis


# =============================================================================
# In-memory lock
# =============================================================================


@pytest.mark.unit
class TestInMemoryAccountLock:
    """Tests for the in-process lock table."""

    async def test_second_owner_is_refused(self, lock):
        assert await lock.try_acquire("k", owner="a", ttl_seconds=30) == HELD
        assert await lock.try_acquire("k", owner="b", ttl_seconds=30) == REFUSED
        assert await lock.is_locked("k")

    async def test_keys_are_independent(self, lock):
        assert await lock.try_acquire("k1", owner="a", ttl_seconds=30) == HELD
        assert await lock.try_acquire("k2", owner="a", ttl_seconds=30) == HELD

    async def test_expired_entry_can_be_taken_over(self, lock, clock):
        await lock.try_acquire("k", owner="a", ttl_seconds=30)
        clock.now += 30

        assert not await lock.is_locked("k")
        assert await lock.try_acquire("k", owner="b", ttl_seconds=30) == HELD

    async def test_release_requires_owner(self, lock):
        await lock.try_acquire("k", owner="a", ttl_seconds=30)

        assert not await lock.release("k", owner="b")
        assert await lock.is_locked("k")
        assert await lock.release("k", owner="a")
        assert not await lock.is_locked("k")

    async def test_stale_owner_cannot_release_new_holder(self, lock, clock):
        await lock.try_acquire("k", owner="a", ttl_seconds=30)
        clock.now += 31
        await lock.try_acquire("k", owner="b", ttl_seconds=30)

        assert not await lock.release("k", owner="a")
        assert await lock.is_locked("k")

    async def test_release_of_unknown_key(self, lock):
        assert not await lock.release("missing", owner="a")

    @pytest.mark.parametrize("ttl", [0, -5])
    async def test_non_positive_ttl_rejected(self, lock, ttl):
        with pytest.raises(ValueError):
            await lock.try_acquire("k", owner="a", ttl_seconds=ttl)
        with pytest.raises(ValueError):
            await lock.extend("k", owner="a", ttl_seconds=ttl)


@pytest.mark.unit
class TestInMemoryAccountLockExtend:
    """Tests for keeping a held entry alive."""

    async def test_extend_pushes_back_expiry(self, lock, clock):
        await lock.try_acquire("k", owner="a", ttl_seconds=30)
        clock.now += 20

        assert await lock.extend("k", owner="a", ttl_seconds=30) == HELD
        clock.now += 20

        assert await lock.is_locked("k")
        assert await lock.try_acquire("k", owner="b", ttl_seconds=30) == REFUSED

    async def test_extend_by_other_owner_is_refused(self, lock):
        await lock.try_acquire("k", owner="a", ttl_seconds=30)

        assert await lock.extend("k", owner="b", ttl_seconds=30) == REFUSED

    async def test_extend_after_expiry_is_refused(self, lock, clock):
        await lock.try_acquire("k", owner="a", ttl_seconds=30)
        clock.now += 30

        assert await lock.extend("k", owner="a", ttl_seconds=30) == REFUSED

    async def test_extend_after_takeover_is_refused(self, lock, clock):
        await lock.try_acquire("k", owner="a", ttl_seconds=30)
        clock.now += 31
        await lock.try_acquire("k", owner="b", ttl_seconds=30)

        assert await lock.extend("k", owner="a", ttl_seconds=30) == REFUSED

    async def test_extend_of_unknown_key(self, lock):
        assert await lock.extend("missing", owner="a", ttl_seconds=30) == REFUSED


# =============================================================================
# Redis lock
# =============================================================================


@pytest.mark.unit
class TestRedisAccountLock:
    """Tests for the Redis SET NX PX lock."""

    def test_registers_scripts(self, mock_redis, mock_logger):
        RedisAccountLock(redis_client=mock_redis, logger=mock_logger)

        registered = [c.args[0] for c in mock_redis.register_script.call_args_list]
        assert registered == [RELEASE_SCRIPT, EXTEND_SCRIPT]

    async def test_acquire_uses_set_nx_px(self, mock_redis, mock_logger):
        lock = RedisAccountLock(redis_client=mock_redis, logger=mock_logger)

        acquired = await lock.try_acquire(
            "sync:account:1", owner="run-1", ttl_seconds=300
        )

        assert acquired == HELD
        mock_redis.set.assert_awaited_once_with(
            "sync:account:1", "run-1", nx=True, px=300_000
        )

    async def test_acquire_refused_when_key_exists(self, mock_redis, mock_logger):
        mock_redis.set.return_value = None
        lock = RedisAccountLock(redis_client=mock_redis, logger=mock_logger)

        assert await lock.try_acquire("k", owner="run-1", ttl_seconds=300) == REFUSED

    async def test_acquire_reports_unreachable_redis(self, mock_redis, mock_logger):
        mock_redis.set.side_effect = RedisConnectionError("down")
        lock = RedisAccountLock(redis_client=mock_redis, logger=mock_logger)

        result = await lock.try_acquire("k", owner="run-1", ttl_seconds=300)

        assert isinstance(result, Failure)
        assert isinstance(result.error, LockServiceError)
        assert result.error.code == ErrorCode.LOCK_SERVICE_UNAVAILABLE
        assert result.error.lock_key == "k"
        assert mock_logger.warning.call_args.args[0] == "account_lock_acquire_failed"

    async def test_extend_is_compare_and_pexpire(self, mock_redis, mock_logger):
        lock = RedisAccountLock(redis_client=mock_redis, logger=mock_logger)

        extended = await lock.extend("k", owner="run-1", ttl_seconds=300)

        assert extended == HELD
        mock_redis.extend_script.assert_awaited_once_with(
            keys=["k"], args=["run-1", 300_000]
        )

    async def test_extend_of_lost_lock(self, mock_redis, mock_logger):
        mock_redis.extend_script.return_value = 0
        lock = RedisAccountLock(redis_client=mock_redis, logger=mock_logger)

        assert await lock.extend("k", owner="run-1", ttl_seconds=300) == REFUSED

    async def test_extend_reports_unreachable_redis(self, mock_redis, mock_logger):
        mock_redis.extend_script.side_effect = RedisConnectionError("down")
        lock = RedisAccountLock(redis_client=mock_redis, logger=mock_logger)

        result = await lock.extend("k", owner="run-1", ttl_seconds=300)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.LOCK_SERVICE_UNAVAILABLE
        assert mock_logger.warning.call_args.args[0] == "account_lock_extend_failed"

    async def test_release_is_compare_and_delete(self, mock_redis, mock_logger):
        lock = RedisAccountLock(redis_client=mock_redis, logger=mock_logger)

        released = await lock.release("k", owner="run-1")

        assert released is True
        mock_redis.release_script.assert_awaited_once_with(keys=["k"], args=["run-1"])

    async def test_release_by_non_owner_returns_false(self, mock_redis, mock_logger):
        mock_redis.release_script.return_value = 0
        lock = RedisAccountLock(redis_client=mock_redis, logger=mock_logger)

        assert await lock.release("k", owner="other") is False

    async def test_release_error_is_logged(self, mock_redis, mock_logger):
        mock_redis.release_script.side_effect = RedisConnectionError("down")
        lock = RedisAccountLock(redis_client=mock_redis, logger=mock_logger)

        assert await lock.release("k", owner="run-1") is False
        assert mock_logger.warning.call_args.args[0] == "account_lock_release_failed"

    async def test_is_locked(self, mock_redis, mock_logger):
        lock = RedisAccountLock(redis_client=mock_redis, logger=mock_logger)

        assert await lock.is_locked("k") is True
        mock_redis.exists.side_effect = RedisConnectionError("down")
        assert await lock.is_locked("k") is False
