"""Result of an atomic batch commit."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class CommitResult:
    """Counts written by TransactionStoreProtocol.commit_batch.

    Attributes:
        created: Rows inserted.
        updated: Rows updated.
    """

    created: int = 0
    updated: int = 0

    @property
    def total(self) -> int:
        """Rows written."""
        return self.created + self.updated
