"""Logging adapters.

Usage:
    from finsync.infrastructure.logging import ConsoleAdapter
"""

from finsync.infrastructure.logging.console_adapter import ConsoleAdapter

__all__ = ["ConsoleAdapter"]
