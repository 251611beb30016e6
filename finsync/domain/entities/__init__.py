"""Domain entities.

Usage:
    from finsync.domain.entities import SyncRun, Transaction
"""

from finsync.domain.entities.sync_run import SyncRun
from finsync.domain.entities.transaction import Transaction

__all__ = ["SyncRun", "Transaction"]
