"""Domain event handlers.

Usage:
    from finsync.infrastructure.events.handlers import LoggingEventHandler
"""

from finsync.infrastructure.events.handlers.logging_event_handler import (
    LoggingEventHandler,
)

__all__ = ["LoggingEventHandler"]
