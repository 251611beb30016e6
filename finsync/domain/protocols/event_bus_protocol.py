"""Event bus protocol (port) for domain events.

Architecture:
    - Protocol (structural typing, NOT ABC inheritance)
    - Domain layer defines the interface (port)
    - Infrastructure implements the adapter (InMemoryEventBus)

Usage:
    >>> event_bus = get_event_bus()
    >>> await event_bus.publish(TransactionSyncAttempted(...))
    >>> event_bus.subscribe(TransactionSyncFailed, handle_sync_failed)
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from finsync.domain.events.base_event import DomainEvent

EventHandler = Callable[[DomainEvent], Awaitable[None]]
"""Async event handler: takes one event, returns None."""


class EventBusProtocol(Protocol):
    """Protocol for event bus implementations.

    Key Requirements:
        1. **Fail-open behavior**: One handler failure must NOT prevent other
           handlers from executing, and must NOT reach the publisher.
        2. **Async support**: All handlers are async.
        3. **Type-based routing**: Handlers registered for an event type only
           receive events of that exact type.
        4. **No ordering guarantees** between handlers.
    """

    def subscribe(
        self,
        event_type: type[DomainEvent],
        handler: EventHandler,
    ) -> None:
        """Register event handler for a specific event type.

        Args:
            event_type: Class of event to handle (exact type match).
            handler: Async function called with the event.
        """
        ...

    async def publish(self, event: DomainEvent) -> None:
        """Publish event to all registered handlers.

        Handler exceptions are logged but NOT propagated.

        Args:
            event: Domain event to publish.
        """
        ...
