"""Container module - Centralized dependency injection.

Re-exports all factory functions from submodules:

    from finsync.core.container import get_logger, get_sync_account_handler

The container is organized into modules by concern:
- infrastructure: Core services (logging, db, redis, locks, rate gate)
- events: Event bus and subscriptions
- repositories: Transaction store factory
- services: Classifier, conflict resolver, retry policy
- handlers: Command handler factories

App-scoped singletons use ``functools.lru_cache``; call ``cache_clear()`` on a
factory (or ``reset_container()``) in tests to drop them.
"""

from finsync.core.container.events import get_event_bus
from finsync.core.container.handlers import (
    get_clear_transaction_category_handler,
    get_resilient_aggregator,
    get_set_transaction_category_handler,
    get_sync_account_handler,
    get_sync_accounts_handler,
)
from finsync.core.container.infrastructure import (
    get_account_lock,
    get_database,
    get_logger,
    get_rate_gate,
    get_redis_client,
)
from finsync.core.container.repositories import get_transaction_store
from finsync.core.container.services import (
    get_category_classifier,
    get_conflict_resolver,
    get_retry_policy,
)


def reset_container() -> None:
    """Clear every cached singleton, including settings."""
    from finsync.core.config import get_settings

    for factory in (
        get_settings,
        get_logger,
        get_database,
        get_redis_client,
        get_account_lock,
        get_rate_gate,
        get_event_bus,
        get_transaction_store,
        get_category_classifier,
        get_conflict_resolver,
        get_retry_policy,
    ):
        factory.cache_clear()


__all__ = [
    "get_account_lock",
    "get_category_classifier",
    "get_clear_transaction_category_handler",
    "get_conflict_resolver",
    "get_database",
    "get_event_bus",
    "get_logger",
    "get_rate_gate",
    "get_redis_client",
    "get_resilient_aggregator",
    "get_retry_policy",
    "get_set_transaction_category_handler",
    "get_sync_account_handler",
    "get_sync_accounts_handler",
    "get_transaction_store",
    "reset_container",
]
