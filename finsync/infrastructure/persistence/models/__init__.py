"""Database models.

Importing this package registers every table on BaseModel.metadata
(Alembic autogenerate and Database.create_all rely on it).
"""

from finsync.infrastructure.persistence.models.account_sync_state import (
    AccountSyncStateModel,
)
from finsync.infrastructure.persistence.models.transaction import TransactionModel

__all__ = ["AccountSyncStateModel", "TransactionModel"]
