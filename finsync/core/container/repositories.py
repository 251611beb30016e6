"""Repository dependency factories."""

from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from finsync.domain.protocols.transaction_store import TransactionStoreProtocol


@lru_cache()
def get_transaction_store() -> "TransactionStoreProtocol":
    """Get transaction store singleton (app-scoped).

    Returns:
        SqlAlchemyTransactionStore when DATABASE_URL is set, otherwise an
        InMemoryTransactionStore.
    """
    from finsync.core.container.infrastructure import get_database, get_logger

    database = get_database()
    if database is None:
        from finsync.infrastructure.persistence.repositories.in_memory_store import (
            InMemoryTransactionStore,
        )

        return InMemoryTransactionStore()

    from finsync.infrastructure.persistence.repositories.transaction_store import (
        SqlAlchemyTransactionStore,
    )

    return SqlAlchemyTransactionStore(database, get_logger())
