"""Core errors package.

Usage:
    from finsync.core.errors import DomainError, ValidationError, NotFoundError
"""

from finsync.core.errors.common_errors import NotFoundError, ValidationError
from finsync.core.errors.domain_error import DomainError

__all__ = [
    "DomainError",
    "ValidationError",
    "NotFoundError",
]
