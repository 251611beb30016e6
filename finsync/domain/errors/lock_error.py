"""Lock service error types."""

from dataclasses import dataclass

from finsync.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class LockServiceError(DomainError):
    """The lock backend could not be reached.

    Distinct from contention: nobody is known to hold the lock.

    Attributes:
        lock_key: Key the operation was for.
    """

    lock_key: str
