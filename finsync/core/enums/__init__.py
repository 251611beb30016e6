"""Core enums package.

Usage:
    from finsync.core.enums import ErrorCode, Environment
"""

from finsync.core.enums.environment import Environment
from finsync.core.enums.error_code import ErrorCode

__all__ = ["ErrorCode", "Environment"]
