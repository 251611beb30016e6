"""Domain protocols (ports) package.

Infrastructure adapters implement these protocols without inheritance.

IMPORTANT: Re-exports are ONLY for protocols defined in this package.

Usage:
    from finsync.domain.protocols import AggregatorProtocol, TransactionStoreProtocol
"""

from finsync.domain.protocols.account_lock_protocol import AccountLockProtocol
from finsync.domain.protocols.aggregator_protocol import AggregatorProtocol
from finsync.domain.protocols.event_bus_protocol import EventBusProtocol, EventHandler
from finsync.domain.protocols.logger_protocol import LoggerProtocol
from finsync.domain.protocols.rate_limit_protocol import TokenBucketStorageProtocol
from finsync.domain.protocols.transaction_store import TransactionStoreProtocol

__all__ = [
    "AccountLockProtocol",
    "AggregatorProtocol",
    "EventBusProtocol",
    "EventHandler",
    "LoggerProtocol",
    "TokenBucketStorageProtocol",
    "TransactionStoreProtocol",
]
