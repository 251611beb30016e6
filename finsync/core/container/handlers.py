"""Command handler factories.

Handlers are request-scoped: a new instance per call, wired to the
app-scoped singletons. Sync handlers take the concrete aggregator client
supplied by the embedding application and wrap it in the resilient boundary.
"""

from typing import TYPE_CHECKING

from finsync.core.config import get_settings
from finsync.core.constants import DEFAULT_CREDENTIAL_KEY
from finsync.core.container.events import get_event_bus
from finsync.core.container.infrastructure import (
    get_account_lock,
    get_logger,
    get_rate_gate,
)
from finsync.core.container.repositories import get_transaction_store
from finsync.core.container.services import (
    get_category_classifier,
    get_conflict_resolver,
    get_retry_policy,
)

if TYPE_CHECKING:
    from finsync.application.commands.handlers import (
        ClearTransactionCategoryHandler,
        SetTransactionCategoryHandler,
        SyncAccountHandler,
        SyncAccountsHandler,
    )
    from finsync.domain.protocols.aggregator_protocol import AggregatorProtocol
    from finsync.infrastructure.aggregator.resilient_client import (
        ResilientAggregatorClient,
    )


def get_resilient_aggregator(
    client: "AggregatorProtocol",
    *,
    credential_key: str = DEFAULT_CREDENTIAL_KEY,
) -> "ResilientAggregatorClient":
    """Wrap an aggregator client with retry, timeout and the shared rate gate.

    Args:
        client: Concrete aggregator client.
        credential_key: Credential set the client authenticates with; token
            buckets are kept per credential set.

    Returns:
        ResilientAggregatorClient implementing AggregatorProtocol.
    """
    from finsync.infrastructure.aggregator.resilient_client import (
        ResilientAggregatorClient,
    )

    if isinstance(client, ResilientAggregatorClient):
        return client
    return ResilientAggregatorClient(
        client=client,
        retry_policy=get_retry_policy(),
        logger=get_logger(),
        gate=get_rate_gate(),
        credential_key=credential_key,
        timeout_seconds=get_settings().aggregator_timeout_seconds,
    )


def get_sync_account_handler(
    client: "AggregatorProtocol",
    *,
    credential_key: str = DEFAULT_CREDENTIAL_KEY,
) -> "SyncAccountHandler":
    """Get SyncAccount command handler for an aggregator client."""
    from finsync.application.commands.handlers import SyncAccountHandler

    settings = get_settings()
    return SyncAccountHandler(
        aggregator=get_resilient_aggregator(client, credential_key=credential_key),
        store=get_transaction_store(),
        lock=get_account_lock(),
        resolver=get_conflict_resolver(),
        classifier=get_category_classifier(),
        event_bus=get_event_bus(),
        logger=get_logger(),
        lock_ttl_seconds=settings.lock_ttl_seconds,
        lock_renew_interval_seconds=settings.lock_renew_interval_seconds,
        default_window_days=settings.sync_default_window_days,
    )


def get_sync_accounts_handler(
    client: "AggregatorProtocol",
    *,
    credential_key: str = DEFAULT_CREDENTIAL_KEY,
) -> "SyncAccountsHandler":
    """Get SyncAccounts (multi-account fan-out) command handler."""
    from finsync.application.commands.handlers import SyncAccountsHandler

    return SyncAccountsHandler(
        sync_account=get_sync_account_handler(client, credential_key=credential_key),
        logger=get_logger(),
    )


def get_set_transaction_category_handler() -> "SetTransactionCategoryHandler":
    """Get SetTransactionCategory command handler."""
    from finsync.application.commands.handlers import SetTransactionCategoryHandler

    return SetTransactionCategoryHandler(
        store=get_transaction_store(),
        event_bus=get_event_bus(),
        logger=get_logger(),
    )


def get_clear_transaction_category_handler() -> "ClearTransactionCategoryHandler":
    """Get ClearTransactionCategory command handler."""
    from finsync.application.commands.handlers import (
        ClearTransactionCategoryHandler,
    )

    return ClearTransactionCategoryHandler(
        store=get_transaction_store(),
        classifier=get_category_classifier(),
        event_bus=get_event_bus(),
        logger=get_logger(),
    )
