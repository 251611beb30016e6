"""Transaction domain entity.

Canonical local record of one financial event on a linked account.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from finsync.domain.enums import CategorySource


@dataclass(frozen=True, kw_only=True)
class Transaction:
    """Financial transaction entity.

    Transactions are created by the sync orchestrator from aggregator data and
    mutated only through reconciliation (core fields, system category) or
    explicit user actions (user category, notes). Every mutation produces a
    new instance via ``dataclasses.replace``.

    **Ownership of fields**:
    - Aggregator-owned (core): amount, description, merchant_name, pending,
      transaction_date. Always refreshed from remote data.
    - User-owned: notes, and category when category_source is USER.

    **Invariants**:
    - (account_id, external_id) is unique.
    - category is not None once the transaction has been classified.
    - last_modified_at never moves backwards (see ``touched``).

    Attributes:
        id: Local identifier (UUID v7), never reused.
        external_id: Aggregator identifier, unique per account.
        account_id: Owning account.
        amount: Signed amount (negative = debit, positive = credit).
        description: Free text from the aggregator.
        merchant_name: Merchant name from the aggregator, if any.
        category: Spending category label.
        category_source: Whether category was assigned by SYSTEM or USER.
        pending: Aggregator-reported settlement status.
        transaction_date: Date of the underlying financial event.
        last_modified_at: Timestamp of the last local mutation.
        last_synced_at: Timestamp of the last reconciliation with remote data.
        notes: Free-form user notes.
        currency: ISO 4217 currency code.

    Example:
        >>> txn = Transaction(
        ...     id=uuid7(),
        ...     external_id="plaid-txn-1",
        ...     account_id=account_id,
        ...     amount=Decimal("-45.00"),
        ...     description="Grocery run",
        ...     merchant_name="Walmart",
        ...     category="Groceries",
        ...     category_source=CategorySource.SYSTEM,
        ...     pending=False,
        ...     transaction_date=date(2025, 11, 28),
        ...     last_modified_at=now,
        ...     last_synced_at=now,
        ... )
        >>> assert txn.is_debit()
    """

    # ========================================================================
    # Identifiers
    # ========================================================================

    id: UUID
    external_id: str
    account_id: UUID

    # ========================================================================
    # Aggregator-owned facts
    # ========================================================================

    amount: Decimal
    description: str
    merchant_name: str | None = None
    pending: bool = False
    transaction_date: date
    currency: str = "USD"

    # ========================================================================
    # Categorization (user-overridable)
    # ========================================================================

    category: str | None = None
    category_source: CategorySource = CategorySource.SYSTEM

    notes: str | None = None
    """User notes. Never touched by reconciliation."""

    # ========================================================================
    # Timestamps
    # ========================================================================

    last_modified_at: datetime
    last_synced_at: datetime | None = None

    # ========================================================================
    # Query Methods
    # ========================================================================

    def is_debit(self) -> bool:
        """Check if money left the account.

        Returns:
            True if amount is negative.
        """
        return self.amount < 0

    def is_credit(self) -> bool:
        """Check if money entered the account.

        Returns:
            True if amount is positive.
        """
        return self.amount > 0

    def is_user_categorized(self) -> bool:
        """Check if the category is a user override.

        Returns:
            True if category_source is USER.
        """
        return self.category_source == CategorySource.USER

    def needs_classification(self) -> bool:
        """Check if the classifier should assign a category.

        Returns:
            True for SYSTEM-sourced transactions without a category.
        """
        return self.category is None and not self.is_user_categorized()

    # ========================================================================
    # Mutation Helpers (return new instances)
    # ========================================================================

    def touched(self, now: datetime) -> "Transaction":
        """Return a copy with last_modified_at advanced to ``now``.

        Keeps last_modified_at monotonic when the clock is behind the
        stored value.

        Args:
            now: Current timestamp.

        Returns:
            Transaction with updated last_modified_at.
        """
        return replace(self, last_modified_at=max(now, self.last_modified_at))

    def with_system_category(self, category: str) -> "Transaction":
        """Return a copy carrying a system-assigned category.

        Args:
            category: Label produced by the classifier.

        Returns:
            Transaction with category set and source SYSTEM.

        Raises:
            ValueError: If the transaction carries a user category.
        """
        if self.is_user_categorized():
            raise ValueError("cannot overwrite a user-assigned category")
        return replace(
            self, category=category, category_source=CategorySource.SYSTEM
        )

    def with_user_category(self, category: str, now: datetime) -> "Transaction":
        """Return a copy carrying a user override.

        Args:
            category: Label chosen by the user.
            now: Current timestamp.

        Returns:
            Transaction with category set, source USER, and touched.
        """
        return replace(
            self, category=category, category_source=CategorySource.USER
        ).touched(now)

    def without_user_category(self, now: datetime) -> "Transaction":
        """Return a copy with the user override cleared.

        The category is reset to None so the classifier assigns a new one.

        Args:
            now: Current timestamp.

        Returns:
            Transaction with source SYSTEM, no category, and touched.
        """
        return replace(
            self, category=None, category_source=CategorySource.SYSTEM
        ).touched(now)
