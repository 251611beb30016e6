"""Default category rule tables.

Rules are plain data consumed by ``CategoryClassifier``. Match order is table
order: the first matching entry wins, so more specific patterns come first.

Merchant rules match as case-insensitive substrings of the merchant name.
Keyword rules match as case-insensitive whole words inside the description.

Usage:
    from finsync.config.category_rules import DEFAULT_CATEGORY_RULES

    classifier = CategoryClassifier(rules=DEFAULT_CATEGORY_RULES)
"""

from dataclasses import dataclass, field

from finsync.core.constants import CATEGORY_MAX_LENGTH

DEFAULT_CATEGORIES: tuple[str, ...] = (
    "Income",
    "Housing",
    "Transportation",
    "Food & Dining",
    "Groceries",
    "Dining",
    "Shopping",
    "Healthcare",
    "Entertainment",
    "Education",
    "Savings",
    "Large Purchases",
    "Miscellaneous",
)
"""Category labels the built-in rules can produce."""


@dataclass(frozen=True, slots=True, kw_only=True)
class CategoryRule:
    """One pattern-to-category mapping.

    Attributes:
        category: Label assigned on match.
        patterns: Merchant fragments or description keywords (any matches).
    """

    category: str
    patterns: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.category or len(self.category) > CATEGORY_MAX_LENGTH:
            raise ValueError(f"invalid category label: {self.category!r}")
        if not self.patterns or any(not p.strip() for p in self.patterns):
            raise ValueError(f"rule {self.category!r} needs non-empty patterns")


@dataclass(frozen=True, slots=True, kw_only=True)
class CategoryRules:
    """Ordered merchant and keyword rule tables.

    Attributes:
        merchant_rules: Checked first, against the merchant name.
        keyword_rules: Checked second, against the description.
    """

    merchant_rules: tuple[CategoryRule, ...] = field(default_factory=tuple)
    keyword_rules: tuple[CategoryRule, ...] = field(default_factory=tuple)


DEFAULT_MERCHANT_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        category="Groceries",
        patterns=("walmart", "target", "costco", "safeway", "kroger", "whole foods"),
    ),
    CategoryRule(
        category="Transportation",
        patterns=("uber", "lyft", "shell", "chevron", "exxon"),
    ),
    CategoryRule(
        category="Entertainment",
        patterns=("netflix", "hulu", "spotify", "apple", "google play"),
    ),
    CategoryRule(
        category="Dining",
        patterns=("starbucks", "mcdonalds", "mcdonald's", "chipotle", "doordash"),
    ),
    CategoryRule(
        category="Shopping",
        patterns=("amazon", "ebay", "bestbuy", "best buy", "nike"),
    ),
    CategoryRule(
        category="Healthcare",
        patterns=("cvs", "walgreens", "pharmacy"),
    ),
)

DEFAULT_KEYWORD_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        category="Income",
        patterns=("payroll", "salary", "direct deposit", "dividend", "interest paid"),
    ),
    CategoryRule(category="Housing", patterns=("rent", "mortgage", "hoa")),
    CategoryRule(
        category="Transportation",
        patterns=("taxi", "transit", "subway", "bus", "parking", "toll"),
    ),
    CategoryRule(category="Dining", patterns=("restaurant", "cafe", "coffee")),
    CategoryRule(category="Groceries", patterns=("grocery", "supermarket")),
    CategoryRule(
        category="Healthcare", patterns=("doctor", "dental", "hospital", "clinic")
    ),
    CategoryRule(category="Education", patterns=("tuition", "school", "university")),
    CategoryRule(category="Savings", patterns=("savings transfer",)),
)

DEFAULT_CATEGORY_RULES = CategoryRules(
    merchant_rules=DEFAULT_MERCHANT_RULES,
    keyword_rules=DEFAULT_KEYWORD_RULES,
)
