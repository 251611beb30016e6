"""User category commands.

Explicit user actions on a transaction's category. These are the only
operations allowed to change a USER category.
"""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, kw_only=True)
class SetTransactionCategory:
    """Command to override a transaction's category.

    Attributes:
        transaction_id: Transaction to change.
        category: New category label (1-100 characters, trimmed).
    """

    transaction_id: UUID
    category: str


@dataclass(frozen=True, kw_only=True)
class ClearTransactionCategory:
    """Command to drop a user override and let the classifier decide again.

    Attributes:
        transaction_id: Transaction to change.
    """

    transaction_id: UUID
