"""Event bus dependency factory.

Application-scoped singleton for domain event publishing. Handlers are
subscribed once, at first use.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from finsync.domain.protocols.event_bus_protocol import EventBusProtocol


@lru_cache()
def get_event_bus() -> "EventBusProtocol":
    """Get event bus singleton (app-scoped).

    Subscriptions:
        - LoggingEventHandler: all sync and category events

    Returns:
        Event bus implementing EventBusProtocol.

    Usage:
        event_bus = get_event_bus()
        await event_bus.publish(TransactionSyncAttempted(...))
    """
    from finsync.core.container.infrastructure import get_logger
    from finsync.infrastructure.events.handlers.logging_event_handler import (
        LoggingEventHandler,
    )
    from finsync.infrastructure.events.in_memory_event_bus import InMemoryEventBus

    logger = get_logger()
    event_bus = InMemoryEventBus(logger=logger)
    LoggingEventHandler(logger).register(event_bus)
    return event_bus
