"""Infrastructure dependency factories.

Application-scoped singletons for core services:
- Logger (structlog console adapter)
- Database (SQLAlchemy async engine), when DATABASE_URL is set
- Redis client, when REDIS_URL is set
- Account lock (memory or Redis)
- Rate/concurrency gate for aggregator calls
"""

from functools import lru_cache
from typing import TYPE_CHECKING, Any

from finsync.core.config import get_settings

if TYPE_CHECKING:
    from finsync.domain.protocols.account_lock_protocol import AccountLockProtocol
    from finsync.domain.protocols.logger_protocol import LoggerProtocol
    from finsync.infrastructure.persistence.database import Database
    from finsync.infrastructure.rate_limit.gate import RateConcurrencyGate


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Return the application-scoped logger singleton.

    Rendering is chosen from settings:
    - development: ConsoleAdapter (human-readable)
    - everything else: ConsoleAdapter (JSON), unless LOG_JSON overrides it

    Returns:
        LoggerProtocol: Logger instance implementing the protocol.
    """
    from finsync.infrastructure.logging.console_adapter import ConsoleAdapter

    settings = get_settings()
    return ConsoleAdapter(use_json=settings.use_json_logs, level=settings.log_level)


@lru_cache()
def get_database() -> "Database | None":
    """Get database manager singleton (app-scoped).

    Returns:
        Database instance, or None when DATABASE_URL is not configured.
    """
    from finsync.infrastructure.persistence.database import Database

    settings = get_settings()
    if settings.database_url is None:
        return None
    return Database(database_url=settings.database_url, echo=settings.db_echo)


@lru_cache()
def get_redis_client() -> Any:
    """Get Redis client singleton (app-scoped).

    Returns:
        redis.asyncio.Redis backed by a shared connection pool.

    Raises:
        ValueError: If REDIS_URL is not configured.
    """
    from redis.asyncio import ConnectionPool, Redis

    settings = get_settings()
    if settings.redis_url is None:
        raise ValueError("REDIS_URL must be set for the redis backends")

    pool = ConnectionPool.from_url(
        settings.redis_url,
        max_connections=20,
        decode_responses=False,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
    )
    return Redis(connection_pool=pool)


@lru_cache()
def get_account_lock() -> "AccountLockProtocol":
    """Get account lock singleton (app-scoped).

    Returns correct adapter based on LOCK_BACKEND:
        - 'memory': InMemoryAccountLock (single process)
        - 'redis': RedisAccountLock (shared across workers)

    Returns:
        Account lock implementing AccountLockProtocol.
    """
    settings = get_settings()
    if settings.lock_backend == "redis":
        from finsync.infrastructure.locks.redis_lock import RedisAccountLock

        return RedisAccountLock(redis_client=get_redis_client(), logger=get_logger())

    from finsync.infrastructure.locks.in_memory_lock import InMemoryAccountLock

    return InMemoryAccountLock()


@lru_cache()
def get_rate_gate() -> "RateConcurrencyGate":
    """Get the aggregator rate/concurrency gate singleton (app-scoped).

    Token bucket storage follows GATE_STORAGE ('memory' or 'redis'). The
    concurrency cap is always process-local.

    Returns:
        RateConcurrencyGate shared by every aggregator client in the process.
    """
    from finsync.domain.value_objects.rate_limit_rule import RateLimitRule
    from finsync.domain.protocols.rate_limit_protocol import (
        TokenBucketStorageProtocol,
    )
    from finsync.infrastructure.rate_limit.gate import RateConcurrencyGate

    settings = get_settings()
    storage: TokenBucketStorageProtocol
    if settings.gate_storage == "redis":
        from finsync.infrastructure.rate_limit.redis_storage import (
            RedisTokenBucketStorage,
        )

        storage = RedisTokenBucketStorage(
            redis_client=get_redis_client(), logger=get_logger()
        )
    else:
        from finsync.infrastructure.rate_limit.memory_storage import (
            InMemoryTokenBucketStorage,
        )

        storage = InMemoryTokenBucketStorage()

    rule = RateLimitRule(
        max_tokens=settings.gate_max_tokens,
        refill_rate=settings.gate_refill_rate,
    )
    return RateConcurrencyGate(
        storage=storage,
        rule=rule,
        max_concurrent=settings.gate_max_concurrent_requests,
        max_wait_seconds=settings.gate_max_wait_seconds,
        logger=get_logger(),
    )
