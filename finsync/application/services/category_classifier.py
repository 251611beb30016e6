"""Deterministic transaction category classifier.

Pure function of its input: no I/O, no clock, no randomness. The same
transaction always receives the same label for a given rule set.

Rules (first match wins):
    1. Merchant table: case-insensitive substring of the merchant name
    2. Keyword table: case-insensitive whole word(s) in the description
    3. Debit with magnitude >= large_purchase_threshold -> "Large Purchases"
    4. Positive amount -> "Income"
    5. Fallback -> "Miscellaneous"

Usage:
    classifier = CategoryClassifier()
    classifier.classify(transaction)  # "Groceries"
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol

from finsync.config.category_rules import DEFAULT_CATEGORY_RULES, CategoryRules
from finsync.core.constants import (
    CATEGORY_FALLBACK,
    CATEGORY_INCOME,
    CATEGORY_LARGE_PURCHASES,
    LARGE_PURCHASE_THRESHOLD_DEFAULT,
)


class Classifiable(Protocol):
    """Anything with the fields the classifier reads."""

    @property
    def description(self) -> str | None: ...

    @property
    def merchant_name(self) -> str | None: ...

    @property
    def amount(self) -> Any: ...

    @property
    def pending(self) -> bool: ...


class CategoryClassifier:
    """Rule-based category classifier.

    Rule tables are compiled once at construction. ``classify`` never raises:
    missing fields and unparsable amounts fall through to later rules.

    Attributes:
        rules: Merchant and keyword tables in match order.
        large_purchase_threshold: Debit magnitude for "Large Purchases".
    """

    def __init__(
        self,
        rules: CategoryRules = DEFAULT_CATEGORY_RULES,
        *,
        large_purchase_threshold: Decimal = LARGE_PURCHASE_THRESHOLD_DEFAULT,
    ) -> None:
        """Initialize classifier.

        Args:
            rules: Rule tables. Defaults to the built-in tables.
            large_purchase_threshold: Debit magnitude for "Large Purchases".

        Raises:
            ValueError: If the threshold is not positive.
        """
        if large_purchase_threshold <= 0:
            raise ValueError("large_purchase_threshold must be positive")
        self.rules = rules
        self.large_purchase_threshold = large_purchase_threshold
        self._merchant_patterns = [
            (tuple(p.lower() for p in rule.patterns), rule.category)
            for rule in rules.merchant_rules
        ]
        self._keyword_patterns = [
            (
                re.compile(
                    r"\b(?:"
                    + "|".join(re.escape(p) for p in rule.patterns)
                    + r")\b",
                    re.IGNORECASE,
                ),
                rule.category,
            )
            for rule in rules.keyword_rules
        ]

    def classify(self, transaction: Classifiable) -> str:
        """Assign a category label.

        ``pending`` is deliberately ignored so a pending-to-settled
        transition never changes the label.

        Args:
            transaction: Object exposing description, merchant_name, amount.

        Returns:
            Non-empty category label.
        """
        merchant = _text(getattr(transaction, "merchant_name", None)).lower()
        if merchant:
            for fragments, category in self._merchant_patterns:
                if any(fragment in merchant for fragment in fragments):
                    return category

        description = _text(getattr(transaction, "description", None))
        if description:
            for pattern, category in self._keyword_patterns:
                if pattern.search(description):
                    return category

        amount = _to_decimal(getattr(transaction, "amount", None))
        if amount is not None:
            if amount < 0 and -amount >= self.large_purchase_threshold:
                return CATEGORY_LARGE_PURCHASES
            if amount > 0:
                return CATEGORY_INCOME

        return CATEGORY_FALLBACK


def _to_decimal(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return amount if amount.is_finite() else None


def _text(value: Any) -> str:
    # Non-string values from loosely typed clients count as missing.
    return value if isinstance(value, str) else ""
