"""Centralized constants for internal implementation details.

Constants here are NOT environment-specific configuration. Tunables that
operators change per deployment live in ``finsync/core/config.py``.

Categories:
- Category labels: Labels produced by the built-in classifier heuristics
- Lock keys: Prefixes for lock service keys
- Limits: Truncation and safety limits
"""

from decimal import Decimal

# =============================================================================
# Category Labels
# =============================================================================

CATEGORY_LARGE_PURCHASES: str = "Large Purchases"
"""Label for debits at or above the large purchase threshold."""

CATEGORY_INCOME: str = "Income"
"""Label for credits that matched no table rule."""

CATEGORY_FALLBACK: str = "Miscellaneous"
"""Label returned when no rule matches."""

CATEGORY_MAX_LENGTH: int = 100
"""Maximum length of a category label (matches the store column)."""


# =============================================================================
# Amounts
# =============================================================================

LARGE_PURCHASE_THRESHOLD_DEFAULT: Decimal = Decimal("1000")
"""Default debit magnitude at which a purchase counts as large."""

MAX_TRANSACTION_AMOUNT_DEFAULT: Decimal = Decimal("1000000")
"""Default absolute amount above which a remote record is rejected."""

AMOUNT_QUANTUM: Decimal = Decimal("0.0001")
"""Smallest stored amount unit (matches the store column scale of 4)."""


# =============================================================================
# Lock Keys
# =============================================================================

ACCOUNT_SYNC_LOCK_PREFIX: str = "sync_lock:account:"
"""Prefix for per-account sync lock keys."""

RATE_LIMIT_KEY_PREFIX: str = "rate_limit:aggregator:"
"""Prefix for aggregator token bucket keys."""

DEFAULT_CREDENTIAL_KEY: str = "default"
"""Token bucket key used when callers do not name a credential set."""


# =============================================================================
# Limits
# =============================================================================

ERROR_MESSAGE_MAX_LENGTH: int = 500
"""Maximum length of library exception text copied into error details."""
