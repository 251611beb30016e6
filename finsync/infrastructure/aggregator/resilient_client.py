"""Resilient aggregator client.

Wraps any AggregatorProtocol implementation and adds, per call:
    - a gate permit (rate limit + concurrency cap)
    - an optional per-attempt timeout
    - retries of transient failures (tenacity), with backoff from a RetryPolicy

Fatal failures (authentication, permission, invalid account) are returned on
the first occurrence. The wrapper itself implements AggregatorProtocol, so
the sync orchestrator cannot tell it from a plain client.

Architecture:
    SyncAccountHandler -> ResilientAggregatorClient -> RateConcurrencyGate
                                                    -> concrete client
"""

import asyncio
import random
from collections.abc import Awaitable, Callable
from datetime import date
from functools import partial
from typing import Any, TypeVar
from uuid import UUID

from tenacity import AsyncRetrying, RetryCallState, retry_if_result, stop_after_attempt

from finsync.core.constants import DEFAULT_CREDENTIAL_KEY
from finsync.core.enums import ErrorCode
from finsync.core.result import Failure, Result, Success
from finsync.domain.enums import TransientErrorKind
from finsync.domain.errors import AggregatorError, AggregatorTransientError
from finsync.domain.protocols.aggregator_protocol import AggregatorProtocol
from finsync.domain.protocols.logger_protocol import LoggerProtocol
from finsync.domain.value_objects.remote_transaction import (
    AccountInfo,
    TransactionPage,
)
from finsync.domain.value_objects.retry_policy import RetryPolicy
from finsync.infrastructure.rate_limit.gate import RateConcurrencyGate

T = TypeVar("T")


class ResilientAggregatorClient:
    """AggregatorProtocol decorator with gate permits and retries.

    Args:
        client: Concrete aggregator client.
        retry_policy: Attempts and backoff for transient failures.
        logger: Structured logger.
        gate: Rate/concurrency gate. None disables gating.
        credential_key: Token bucket the client's credentials draw from.
        timeout_seconds: Per-attempt timeout. None disables it.
        sleep: Async sleep (injectable for tests).
        rng: Jitter source (injectable for tests).
    """

    def __init__(
        self,
        *,
        client: AggregatorProtocol,
        retry_policy: RetryPolicy,
        logger: LoggerProtocol,
        gate: RateConcurrencyGate | None = None,
        credential_key: str = DEFAULT_CREDENTIAL_KEY,
        timeout_seconds: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self._client = client
        self._policy = retry_policy
        self._logger = logger
        self._gate = gate
        self._credential_key = credential_key
        self._timeout = timeout_seconds
        self._sleep = sleep
        self._rng = rng

    async def fetch_transactions(
        self,
        account_id: UUID,
        *,
        since: date,
        page_token: str | None = None,
    ) -> Result[TransactionPage, AggregatorError]:
        """Fetch one page of transactions with gating and retries."""
        return await self._call(
            "fetch_transactions",
            account_id,
            lambda: self._client.fetch_transactions(
                account_id, since=since, page_token=page_token
            ),
        )

    async def fetch_account_metadata(
        self,
        account_id: UUID,
    ) -> Result[AccountInfo, AggregatorError]:
        """Fetch account metadata with gating and retries."""
        return await self._call(
            "fetch_account_metadata",
            account_id,
            lambda: self._client.fetch_account_metadata(account_id),
        )

    async def _call(
        self,
        operation: str,
        account_id: UUID,
        call: Callable[[], Awaitable[Result[T, AggregatorError]]],
    ) -> Result[T, AggregatorError]:
        context = {"operation": operation, "account_id": str(account_id)}
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._policy.max_attempts),
            wait=self._backoff,
            retry=retry_if_result(_is_transient_failure),
            before_sleep=partial(self._log_retry, context),
            retry_error_callback=partial(self._log_exhausted, context),
            sleep=self._sleep,
        )
        result = await retrying(self._attempt, account_id, call)
        match result:
            case Failure(error=error) if not isinstance(
                error, AggregatorTransientError
            ):
                self._logger.error(
                    "aggregator_call_failed", error_code=error.code.value, **context
                )
        return result

    def _backoff(self, retry_state: RetryCallState) -> float:
        error = retry_state.outcome.result().error
        return self._policy.delay_for(
            retry_state.attempt_number, retry_after=error.retry_after, rng=self._rng
        )

    def _log_retry(self, context: dict[str, str], retry_state: RetryCallState) -> None:
        error = retry_state.outcome.result().error
        self._logger.warning(
            "aggregator_retry_scheduled",
            attempt=retry_state.attempt_number,
            delay_seconds=round(retry_state.next_action.sleep, 3),
            kind=error.kind.value,
            status_code=error.status_code,
            **context,
        )

    def _log_exhausted(
        self, context: dict[str, str], retry_state: RetryCallState
    ) -> Result[Any, AggregatorError]:
        result = retry_state.outcome.result()
        self._logger.warning(
            "aggregator_retries_exhausted",
            attempts=retry_state.attempt_number,
            error_code=result.error.code.value,
            **context,
        )
        return result

    async def _attempt(
        self,
        account_id: UUID,
        call: Callable[[], Awaitable[Result[T, AggregatorError]]],
    ) -> Result[T, AggregatorError]:
        if self._gate is None:
            return await self._timed(call)

        match await self._gate.acquire(account_id, credential_key=self._credential_key):
            case Failure(error=gate_error):
                return Failure(
                    error=AggregatorTransientError(
                        code=ErrorCode.AGGREGATOR_RATE_LIMITED,
                        message=gate_error.message,
                        kind=TransientErrorKind.RATE_LIMITED,
                        retry_after=gate_error.retry_after or None,
                    )
                )
            case Success(value=permit):
                try:
                    return await self._timed(call)
                finally:
                    self._gate.release(permit)

    async def _timed(
        self,
        call: Callable[[], Awaitable[Result[T, AggregatorError]]],
    ) -> Result[T, AggregatorError]:
        try:
            async with asyncio.timeout(self._timeout):
                return await call()
        except TimeoutError:
            return Failure(
                error=AggregatorTransientError(
                    code=ErrorCode.AGGREGATOR_TIMEOUT,
                    message=f"Aggregator call exceeded {self._timeout}s",
                    kind=TransientErrorKind.TIMEOUT,
                )
            )


def _is_transient_failure(result: Result[Any, AggregatorError]) -> bool:
    return isinstance(result, Failure) and isinstance(
        result.error, AggregatorTransientError
    )
