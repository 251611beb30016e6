"""Unit tests for RateConcurrencyGate and InMemoryTokenBucketStorage.

Uses a fake monotonic clock whose sleep advances time, so token refill is
deterministic and no test waits on real rate limits.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from uuid_extensions import uuid7

from finsync.core.enums import ErrorCode
from finsync.core.result import Failure, Success
from finsync.domain.errors import GateRejectedError
from finsync.domain.value_objects import RateLimitResult, RateLimitRule
from finsync.infrastructure.rate_limit.gate import RateConcurrencyGate
from finsync.infrastructure.rate_limit.memory_storage import InMemoryTokenBucketStorage


class FakeClock:
    """Monotonic clock advanced only by its own sleep."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def build_gate(clock, mock_logger):
    def _build(
        *,
        storage=None,
        rule: RateLimitRule | None = None,
        max_concurrent: int = 10,
        max_wait_seconds: float = 5.0,
    ) -> RateConcurrencyGate:
        return RateConcurrencyGate(
            storage=storage or InMemoryTokenBucketStorage(clock=clock),
            rule=rule or RateLimitRule(max_tokens=2, refill_rate=60.0),
            max_concurrent=max_concurrent,
            max_wait_seconds=max_wait_seconds,
            logger=mock_logger,
            clock=clock,
            sleep=clock.sleep,
        )

    return _build


# =============================================================================
# Token bucket
# =============================================================================


@pytest.mark.unit
class TestTokenBucketGate:
    """Tests for the rate limit half of the gate."""

    async def test_burst_then_waits_for_refill(self, build_gate, clock):
        gate = build_gate()
        account_id = uuid7()

        permits = [await gate.acquire(account_id) for _ in range(3)]

        assert all(isinstance(p, Success) for p in permits)
        assert clock.sleeps == [1.0]
        assert permits[2].value.waited_seconds == pytest.approx(1.0)

    async def test_rejects_when_wait_exceeds_budget(self, build_gate, clock):
        gate = build_gate(max_wait_seconds=0.5)
        account_id = uuid7()
        await gate.acquire(account_id)
        await gate.acquire(account_id)

        result = await gate.acquire(account_id)

        assert isinstance(result, Failure)
        assert isinstance(result.error, GateRejectedError)
        assert result.error.code == ErrorCode.RATE_LIMIT_EXCEEDED
        assert result.error.reason == "rate_limited"
        assert result.error.retry_after == pytest.approx(1.0)
        assert clock.sleeps == []

    async def test_buckets_are_per_credential(self, build_gate, clock):
        gate = build_gate(max_wait_seconds=0.0)
        account_id = uuid7()
        await gate.acquire(account_id, credential_key="a")
        await gate.acquire(account_id, credential_key="a")

        denied = await gate.acquire(account_id, credential_key="a")
        other = await gate.acquire(account_id, credential_key="b")

        assert isinstance(denied, Failure)
        assert isinstance(other, Success)

    async def test_zero_retry_after_never_busy_spins(self, build_gate, clock):
        storage = AsyncMock()
        storage.check_and_consume.side_effect = [
            Success(value=RateLimitResult(allowed=False, retry_after=0.0)),
            Success(value=RateLimitResult(allowed=True)),
        ]
        gate = build_gate(storage=storage)

        result = await gate.acquire(uuid7())

        assert isinstance(result, Success)
        assert clock.sleeps == [0.001]

    async def test_storage_failure_fails_open(self, build_gate, mock_logger):
        storage = AsyncMock()
        storage.check_and_consume.return_value = Failure(
            error=GateRejectedError(
                code=ErrorCode.RATE_LIMIT_CHECK_FAILED, message="redis down"
            )
        )
        gate = build_gate(storage=storage)

        result = await gate.acquire(uuid7())

        assert isinstance(result, Success)
        assert mock_logger.warning.call_args.args[0] == "rate_gate_check_failed"

    async def test_disabled_rule_skips_storage(self, build_gate):
        storage = AsyncMock()
        gate = build_gate(
            storage=storage,
            rule=RateLimitRule(max_tokens=1, refill_rate=1.0, enabled=False),
        )

        result = await gate.acquire(uuid7())

        assert isinstance(result, Success)
        storage.check_and_consume.assert_not_awaited()

    async def test_reset_uses_credential_key(self, build_gate):
        storage = AsyncMock()
        storage.reset.return_value = Success(value=None)
        gate = build_gate(storage=storage)

        await gate.reset("plaid-prod")

        assert storage.reset.await_args.kwargs["key_base"] == (
            "rate_limit:aggregator:plaid-prod"
        )


# =============================================================================
# Concurrency cap
# =============================================================================


@pytest.mark.unit
class TestConcurrencyCap:
    """Tests for the semaphore half of the gate."""

    async def test_cap_rejects_after_wait_budget(self, build_gate):
        gate = build_gate(
            rule=RateLimitRule(max_tokens=100, refill_rate=60.0),
            max_concurrent=1,
            max_wait_seconds=0.01,
        )
        first = await gate.acquire(uuid7())

        second = await gate.acquire(uuid7())

        assert isinstance(first, Success)
        assert isinstance(second, Failure)
        assert second.error.reason == "concurrency_limited"
        assert gate.in_flight == 1

    async def test_waiter_gets_slot_on_release(self, build_gate):
        gate = build_gate(
            rule=RateLimitRule(max_tokens=100, refill_rate=60.0),
            max_concurrent=1,
        )
        first = await gate.acquire(uuid7())
        waiter = asyncio.create_task(gate.acquire(uuid7()))
        await asyncio.sleep(0)

        gate.release(first.value)
        second = await waiter

        assert isinstance(second, Success)
        assert gate.in_flight == 1

    async def test_release_is_idempotent(self, build_gate):
        gate = build_gate(
            rule=RateLimitRule(max_tokens=100, refill_rate=60.0),
            max_concurrent=1,
            max_wait_seconds=0.01,
        )
        first = await gate.acquire(uuid7())

        gate.release(first.value)
        gate.release(first.value)
        second = await gate.acquire(uuid7())
        third = await gate.acquire(uuid7())

        assert isinstance(second, Success)
        assert isinstance(third, Failure)
        assert gate.in_flight == 1

    async def test_concurrency_rejection_spends_no_token(self, build_gate, clock):
        gate = build_gate(max_concurrent=1, max_wait_seconds=0.01)
        first = await gate.acquire(uuid7())

        rejected = await gate.acquire(uuid7())
        gate.release(first.value)
        after_release = await gate.acquire(uuid7())

        assert rejected.error.reason == "concurrency_limited"
        assert isinstance(after_release, Success)
        assert clock.sleeps == []

    async def test_rate_rejection_frees_slot(self, build_gate, clock):
        gate = build_gate(
            rule=RateLimitRule(max_tokens=1, refill_rate=60.0),
            max_concurrent=1,
            max_wait_seconds=0.5,
        )
        first = await gate.acquire(uuid7())
        gate.release(first.value)

        denied = await gate.acquire(uuid7())
        clock.now += 1.0
        refilled = await gate.acquire(uuid7())

        assert denied.error.reason == "rate_limited"
        assert isinstance(refilled, Success)
        assert gate.in_flight == 1

    async def test_cancelled_token_wait_frees_slot(self, mock_logger):
        storage = AsyncMock()
        storage.check_and_consume.return_value = Success(
            value=RateLimitResult(allowed=False, retry_after=1.0)
        )
        never = asyncio.Event()

        async def blocking_sleep(seconds: float) -> None:
            await never.wait()

        gate = RateConcurrencyGate(
            storage=storage,
            rule=RateLimitRule(max_tokens=1, refill_rate=60.0),
            max_concurrent=1,
            max_wait_seconds=5.0,
            logger=mock_logger,
            sleep=blocking_sleep,
        )
        waiter = asyncio.create_task(gate.acquire(uuid7()))
        await asyncio.sleep(0)
        waiter.cancel()

        with pytest.raises(asyncio.CancelledError):
            await waiter

        storage.check_and_consume.return_value = Success(
            value=RateLimitResult(allowed=True)
        )
        assert isinstance(await gate.acquire(uuid7()), Success)

    @pytest.mark.parametrize(
        "kwargs", [{"max_concurrent": 0}, {"max_wait_seconds": -1.0}]
    )
    def test_invalid_configuration(self, build_gate, kwargs):
        with pytest.raises(ValueError):
            build_gate(**kwargs)


# =============================================================================
# In-memory storage
# =============================================================================


@pytest.mark.unit
class TestInMemoryTokenBucketStorage:
    """Tests for the in-process token bucket."""

    async def test_refills_by_elapsed_time(self, clock):
        storage = InMemoryTokenBucketStorage(clock=clock)
        rule = RateLimitRule(max_tokens=1, refill_rate=6.0)

        first = await storage.check_and_consume(key_base="k", rule=rule)
        denied = await storage.check_and_consume(key_base="k", rule=rule)
        clock.now += 11.0
        refilled = await storage.check_and_consume(key_base="k", rule=rule)

        assert first.value.allowed
        assert not denied.value.allowed
        assert denied.value.retry_after == pytest.approx(10.0)
        assert refilled.value.allowed

    async def test_capacity_is_capped(self, clock):
        storage = InMemoryTokenBucketStorage(clock=clock)
        rule = RateLimitRule(max_tokens=3, refill_rate=60.0)
        await storage.check_and_consume(key_base="k", rule=rule)
        clock.now += 3600.0

        result = await storage.check_and_consume(key_base="k", rule=rule)

        assert result.value.remaining == 2
        assert result.value.limit == 3

    async def test_reset_refills_bucket(self, clock):
        storage = InMemoryTokenBucketStorage(clock=clock)
        rule = RateLimitRule(max_tokens=1, refill_rate=1.0)
        await storage.check_and_consume(key_base="k", rule=rule)

        await storage.reset(key_base="k", rule=rule)
        result = await storage.check_and_consume(key_base="k", rule=rule)

        assert result.value.allowed
