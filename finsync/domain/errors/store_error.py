"""Transaction store error types.

Store adapters catch persistence library exceptions at the boundary and
return these errors instead.
"""

from dataclasses import dataclass

from finsync.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class StoreCommitError(DomainError):
    """The batch commit failed atomically; none of its rows are visible.

    Attributes:
        batch_size: Number of decisions in the failed batch.
    """

    batch_size: int = 0


@dataclass(frozen=True, slots=True, kw_only=True)
class StoreWriteError(DomainError):
    """A single-record write or sync-state update failed."""

    pass


@dataclass(frozen=True, slots=True, kw_only=True)
class StoreReadError(DomainError):
    """A lookup could not be answered (connection loss, ...)."""

    pass
