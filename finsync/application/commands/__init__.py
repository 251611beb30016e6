"""Application commands.

Usage:
    from finsync.application.commands import SyncAccount, SetTransactionCategory
"""

from finsync.application.commands.category_commands import (
    ClearTransactionCategory,
    SetTransactionCategory,
)
from finsync.application.commands.sync_commands import SyncAccount, SyncAccounts

__all__ = [
    "ClearTransactionCategory",
    "SetTransactionCategory",
    "SyncAccount",
    "SyncAccounts",
]
