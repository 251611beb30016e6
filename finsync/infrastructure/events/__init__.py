"""Event bus adapters.

Usage:
    from finsync.infrastructure.events import InMemoryEventBus
"""

from finsync.infrastructure.events.in_memory_event_bus import InMemoryEventBus

__all__ = ["InMemoryEventBus"]
