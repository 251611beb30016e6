"""Domain-level error codes (machine-readable).

Error codes follow ENTITY_ACTION_REASON naming convention and travel inside
every DomainError returned through Result types.

Categories:
- Validation errors (INVALID_*, VALIDATION_*)
- Resource errors (*_NOT_FOUND)
- Sync lifecycle errors (SYNC_*)
- Lock service errors (LOCK_*)
- Aggregator errors (AGGREGATOR_*)
- Reconciliation errors (RECORD_*)
- Store errors (STORE_*)
- Rate limit errors (RATE_LIMIT_*)
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain-level error codes (machine-readable)."""

    # Validation errors
    VALIDATION_FAILED = "validation_failed"
    INVALID_CATEGORY = "invalid_category"

    # Resource errors
    TRANSACTION_NOT_FOUND = "transaction_not_found"

    # Sync lifecycle errors
    SYNC_ALREADY_IN_PROGRESS = "sync_already_in_progress"
    SYNC_CANCELLED = "sync_cancelled"
    SYNC_LOCK_LOST = "sync_lock_lost"
    SYNC_UNEXPECTED_ERROR = "sync_unexpected_error"

    # Lock service errors
    LOCK_SERVICE_UNAVAILABLE = "lock_service_unavailable"

    # Aggregator errors
    AGGREGATOR_UNAVAILABLE = "aggregator_unavailable"
    AGGREGATOR_TIMEOUT = "aggregator_timeout"
    AGGREGATOR_RATE_LIMITED = "aggregator_rate_limited"
    AGGREGATOR_AUTHENTICATION_FAILED = "aggregator_authentication_failed"
    AGGREGATOR_PERMISSION_DENIED = "aggregator_permission_denied"
    AGGREGATOR_INVALID_ACCOUNT = "aggregator_invalid_account"

    # Reconciliation errors
    RECORD_REJECTED = "record_rejected"

    # Store errors
    STORE_COMMIT_FAILED = "store_commit_failed"
    STORE_WRITE_FAILED = "store_write_failed"
    STORE_READ_FAILED = "store_read_failed"

    # Rate limit errors
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    RATE_LIMIT_CHECK_FAILED = "rate_limit_check_failed"
    RATE_LIMIT_RESET_FAILED = "rate_limit_reset_failed"
