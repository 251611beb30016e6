"""Redis-backed token bucket storage using an atomic Lua script.

Implements the low-level token bucket operations against Redis using the
``lua_scripts/token_bucket.lua`` script (EVALSHA). Key shaping is done by the
gate.

Fail-open policy:
    check_and_consume returns Success(allowed=True) on infrastructure
    failures. Admin reset failures are returned as Failure(GateRejectedError).
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from time import time
from typing import Any

from redis.exceptions import RedisError

from finsync.core.enums import ErrorCode
from finsync.core.result import Failure, Result, Success
from finsync.domain.errors import GateRejectedError
from finsync.domain.protocols.logger_protocol import LoggerProtocol
from finsync.domain.value_objects.rate_limit_rule import RateLimitResult, RateLimitRule


@dataclass(slots=True)
class _LuaRefs:
    """Holds compiled Lua script SHA references."""

    token_bucket_sha: str | None = None


class RedisTokenBucketStorage:
    """Redis storage for token buckets with an atomic Lua script.

    Loads the Lua script once and executes it via EVALSHA. Buckets are shared
    by every process using the same Redis, so the aggregator limit holds
    across workers.

    Args:
        redis_client: An async Redis client (redis.asyncio.Redis compatible).
        logger: Structured logger for fail-open warnings.
    """

    def __init__(self, *, redis_client: Any, logger: LoggerProtocol) -> None:
        self.redis = redis_client
        self._logger = logger
        self._lua = _LuaRefs()
        self._script_lock = asyncio.Lock()

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    async def check_and_consume(
        self,
        *,
        key_base: str,
        rule: RateLimitRule,
        cost: int = 1,
        now_ts: float | None = None,
    ) -> Result[RateLimitResult, GateRejectedError]:
        """Atomically check and optionally consume tokens.

        Args:
            key_base: Bucket key (storage adds ':tokens'/':time').
            rule: Rule containing capacity and refill rate.
            cost: Tokens to consume.
            now_ts: Override current timestamp in seconds (for testing).

        Returns:
            Success(RateLimitResult).

        Fail-open:
            On Redis errors, returns Success(allowed=True, remaining=max_tokens).
        """
        try:
            sha = await self._ensure_token_bucket_script()
            now = now_ts if now_ts is not None else time()
            resp = await self.redis.evalsha(
                sha,
                1,
                key_base,
                int(rule.max_tokens),
                float(rule.refill_rate),
                int(max(0, cost)),
                float(now),
            )
            # resp: [allowed(0/1), retry_after(str), remaining(int)]
            return Success(
                value=RateLimitResult(
                    allowed=bool(int(resp[0])),
                    retry_after=float(resp[1]),
                    remaining=int(resp[2]),
                    limit=rule.max_tokens,
                )
            )
        except (RedisError, OSError, IndexError, TypeError, ValueError) as exc:
            self._lua.token_bucket_sha = None
            self._logger.warning(
                "rate_limit_storage_unavailable",
                key_base=key_base,
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
            return Success(
                value=RateLimitResult(
                    allowed=True,
                    remaining=rule.max_tokens,
                    limit=rule.max_tokens,
                )
            )

    async def reset(
        self,
        *,
        key_base: str,
        rule: RateLimitRule,
        now_ts: float | None = None,
    ) -> Result[None, GateRejectedError]:
        """Reset the bucket to full capacity.

        Unlike check operations, reset reports real errors to callers.
        """
        try:
            now = now_ts if now_ts is not None else time()
            ttl = rule.ttl_seconds
            pipe = self.redis.pipeline(transaction=True)
            pipe.setex(f"{key_base}:tokens", ttl, int(rule.max_tokens))
            pipe.setex(f"{key_base}:time", ttl, float(now))
            await pipe.execute()
            return Success(value=None)
        except RedisError as exc:
            return Failure(
                error=GateRejectedError(
                    code=ErrorCode.RATE_LIMIT_RESET_FAILED,
                    message=f"Failed to reset rate limit for '{key_base}': {exc}",
                    details={"key_base": key_base},
                    reason="reset_failed",
                )
            )

    # ---------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------
    async def _ensure_token_bucket_script(self) -> str:
        """Load the token bucket Lua script into Redis and cache the SHA."""
        if self._lua.token_bucket_sha:
            return self._lua.token_bucket_sha
        async with self._script_lock:
            if self._lua.token_bucket_sha:
                return self._lua.token_bucket_sha
            script = await _read_lua_script("lua_scripts/token_bucket.lua")
            sha: str = await self.redis.script_load(script)
            self._lua.token_bucket_sha = sha
            return sha


def _read_lua_script_sync(path: Path) -> str:
    """Synchronous helper to read a Lua script (called via run_in_executor)."""
    return path.read_text(encoding="utf-8")


async def _read_lua_script(rel_path: str) -> str:
    """Read a Lua script file relative to this module without blocking the loop."""
    full_path = Path(__file__).parent / rel_path
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(_read_lua_script_sync, full_path))
