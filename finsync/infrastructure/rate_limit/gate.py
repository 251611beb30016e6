"""Rate/concurrency gate in front of the aggregator.

Every aggregator request passes through the gate:

    1. Global semaphore capping concurrent in-flight requests.
    2. Token bucket per credential key. A denied caller sleeps exactly the
       bucket's retry_after while that fits in its wait budget, otherwise it
       is rejected with a retryable GateRejectedError and its slot is freed.

A granted Permit must be released after the request (``release`` is
idempotent). The gate never busy-spins: every wait is a sleep or a
semaphore wait.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from finsync.core.constants import DEFAULT_CREDENTIAL_KEY, RATE_LIMIT_KEY_PREFIX
from finsync.core.enums import ErrorCode
from finsync.core.result import Failure, Result, Success
from finsync.domain.errors import GateRejectedError
from finsync.domain.protocols.logger_protocol import LoggerProtocol
from finsync.domain.protocols.rate_limit_protocol import TokenBucketStorageProtocol
from finsync.domain.value_objects.rate_limit_rule import RateLimitRule

# Floor for a denied caller's sleep so a zero retry_after cannot spin.
_MIN_SLEEP_SECONDS = 0.001


@dataclass(frozen=True, slots=True, kw_only=True)
class Permit:
    """Right to issue one aggregator request.

    Attributes:
        id: Permit identifier.
        account_id: Account the request is made for.
        credential_key: Bucket the token was taken from.
        waited_seconds: Time spent waiting for the permit.
    """

    id: UUID = field(default_factory=uuid4)
    account_id: UUID
    credential_key: str
    waited_seconds: float = 0.0


class RateConcurrencyGate:
    """Bounds aggregator request rate and concurrency.

    Args:
        storage: Token bucket storage (in-memory or Redis).
        rule: Bucket capacity and refill rate, shared by every credential.
        max_concurrent: Maximum permits outstanding at once.
        max_wait_seconds: Wait budget per acquire call.
        logger: Structured logger.
        clock: Monotonic clock in seconds.
        sleep: Async sleep (injectable for tests).
    """

    def __init__(
        self,
        *,
        storage: TokenBucketStorageProtocol,
        rule: RateLimitRule,
        max_concurrent: int,
        max_wait_seconds: float,
        logger: LoggerProtocol,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {max_concurrent}")
        if max_wait_seconds < 0:
            raise ValueError(f"max_wait_seconds must be >= 0, got {max_wait_seconds}")
        self._storage = storage
        self._rule = rule
        self._max_concurrent = max_concurrent
        self._max_wait = max_wait_seconds
        self._logger = logger
        self._clock = clock
        self._sleep = sleep
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._outstanding: set[UUID] = set()

    @property
    def in_flight(self) -> int:
        """Number of permits currently outstanding."""
        return len(self._outstanding)

    async def acquire(
        self,
        account_id: UUID,
        *,
        credential_key: str = DEFAULT_CREDENTIAL_KEY,
    ) -> Result[Permit, GateRejectedError]:
        """Wait for a concurrency slot and a token.

        The slot is taken first and handed back on any rejection, so a
        rejected caller never spends a token.

        Args:
            account_id: Account the request is made for (logging only).
            credential_key: Token bucket to draw from.

        Returns:
            Success(Permit) or Failure(GateRejectedError) when the wait
            budget would be exceeded.
        """
        started = self._clock()
        deadline = started + self._max_wait

        if not await self._acquire_slot(deadline):
            self._logger.warning(
                "rate_gate_rejected",
                account_id=str(account_id),
                credential_key=credential_key,
                reason="concurrency_limited",
            )
            return Failure(
                error=GateRejectedError(
                    code=ErrorCode.RATE_LIMIT_EXCEEDED,
                    message="Too many concurrent aggregator requests",
                    retry_after=0.0,
                    reason="concurrency_limited",
                )
            )

        try:
            rejection = await self._take_token(account_id, credential_key, deadline)
        except BaseException:
            self._semaphore.release()
            raise
        if rejection is not None:
            self._semaphore.release()
            return Failure(error=rejection)

        permit = Permit(
            account_id=account_id,
            credential_key=credential_key,
            waited_seconds=self._clock() - started,
        )
        self._outstanding.add(permit.id)
        return Success(value=permit)

    async def _acquire_slot(self, deadline: float) -> bool:
        if not self._semaphore.locked():
            await self._semaphore.acquire()
            return True
        try:
            await asyncio.wait_for(
                self._semaphore.acquire(),
                timeout=max(0.0, deadline - self._clock()),
            )
        except TimeoutError:
            return False
        return True

    async def _take_token(
        self, account_id: UUID, credential_key: str, deadline: float
    ) -> GateRejectedError | None:
        """Consume one token, sleeping within the wait budget; None on success."""
        if not self._rule.enabled:
            return None
        key_base = f"{RATE_LIMIT_KEY_PREFIX}{credential_key}"

        while True:
            match await self._storage.check_and_consume(
                key_base=key_base, rule=self._rule, cost=self._rule.cost
            ):
                case Success(value=decision):
                    pass
                case Failure(error=error):
                    self._logger.warning(
                        "rate_gate_check_failed",
                        credential_key=credential_key,
                        error_code=error.code.value,
                    )
                    return None
            if decision.allowed:
                return None
            remaining_wait = deadline - self._clock()
            if decision.retry_after > remaining_wait:
                self._logger.warning(
                    "rate_gate_rejected",
                    account_id=str(account_id),
                    credential_key=credential_key,
                    retry_after=decision.retry_after,
                )
                return GateRejectedError(
                    code=ErrorCode.RATE_LIMIT_EXCEEDED,
                    message="Aggregator rate limit exceeded",
                    retry_after=decision.retry_after,
                    reason="rate_limited",
                )
            self._logger.debug(
                "rate_gate_waiting",
                account_id=str(account_id),
                credential_key=credential_key,
                retry_after=decision.retry_after,
            )
            await self._sleep(max(decision.retry_after, _MIN_SLEEP_SECONDS))

    def release(self, permit: Permit) -> None:
        """Return a permit's concurrency slot. Releasing twice is a no-op."""
        if permit.id not in self._outstanding:
            return
        self._outstanding.discard(permit.id)
        self._semaphore.release()

    async def reset(
        self, credential_key: str = DEFAULT_CREDENTIAL_KEY
    ) -> Result[None, GateRejectedError]:
        """Refill a credential's bucket (administrative)."""
        return await self._storage.reset(
            key_base=f"{RATE_LIMIT_KEY_PREFIX}{credential_key}", rule=self._rule
        )
