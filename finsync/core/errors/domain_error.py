"""Base domain error class for railway-oriented programming.

DomainError is the base class for every error in finsync. Errors flow through
the system as data inside Result types; they are returned, never raised.

Architecture:
- Base class for core, domain and infrastructure error types
- Does NOT inherit from Exception
- Dataclass inheritance (not Protocol/ABC)

Usage:
    @dataclass(frozen=True, slots=True, kw_only=True)
    class StoreCommitError(DomainError):
        pass  # inherits code, message, details
"""

from dataclasses import dataclass
from typing import Any

from finsync.core.enums import ErrorCode


@dataclass(frozen=True, slots=True, kw_only=True)
class DomainError:
    """Base domain error (does NOT inherit from Exception).

    Attributes:
        code: Machine-readable error code.
        message: Human-readable error message.
        details: Optional context for debugging.
    """

    code: ErrorCode
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        """String representation of error."""
        return f"{self.code.value}: {self.message}"
