"""Transaction store adapters.

Usage:
    from finsync.infrastructure.persistence.repositories import (
        InMemoryTransactionStore,
        SqlAlchemyTransactionStore,
    )
"""

from finsync.infrastructure.persistence.repositories.in_memory_store import (
    InMemoryTransactionStore,
)
from finsync.infrastructure.persistence.repositories.transaction_store import (
    SqlAlchemyTransactionStore,
)

__all__ = ["InMemoryTransactionStore", "SqlAlchemyTransactionStore"]
