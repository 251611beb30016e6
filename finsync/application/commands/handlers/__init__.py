"""Command handlers.

Usage:
    from finsync.application.commands.handlers import SyncAccountHandler
"""

from finsync.application.commands.handlers.clear_transaction_category_handler import (
    ClearTransactionCategoryHandler,
)
from finsync.application.commands.handlers.set_transaction_category_handler import (
    SetTransactionCategoryHandler,
)
from finsync.application.commands.handlers.sync_account_handler import (
    SyncAccountHandler,
)
from finsync.application.commands.handlers.sync_accounts_handler import (
    SyncAccountsHandler,
    SyncAccountsResult,
)

__all__ = [
    "ClearTransactionCategoryHandler",
    "SetTransactionCategoryHandler",
    "SyncAccountHandler",
    "SyncAccountsHandler",
    "SyncAccountsResult",
]
