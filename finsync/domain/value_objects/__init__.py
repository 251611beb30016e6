"""Domain value objects.

Usage:
    from finsync.domain.value_objects import RemoteTransactionSnapshot, RetryPolicy
"""

from finsync.domain.value_objects.commit_result import CommitResult
from finsync.domain.value_objects.rate_limit_rule import RateLimitResult, RateLimitRule
from finsync.domain.value_objects.remote_transaction import (
    AccountInfo,
    RemoteTransactionSnapshot,
    TransactionPage,
)
from finsync.domain.value_objects.retry_policy import RetryPolicy

__all__ = [
    "AccountInfo",
    "CommitResult",
    "RateLimitResult",
    "RateLimitRule",
    "RemoteTransactionSnapshot",
    "RetryPolicy",
    "TransactionPage",
]
