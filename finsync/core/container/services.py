"""Application service factories."""

from functools import lru_cache
from typing import TYPE_CHECKING

from finsync.core.config import get_settings

if TYPE_CHECKING:
    from finsync.application.services.category_classifier import CategoryClassifier
    from finsync.application.services.conflict_resolver import ConflictResolver
    from finsync.domain.value_objects.retry_policy import RetryPolicy


@lru_cache()
def get_category_classifier() -> "CategoryClassifier":
    """Get classifier with the default rule tables and configured threshold."""
    from finsync.application.services.category_classifier import CategoryClassifier

    return CategoryClassifier(
        large_purchase_threshold=get_settings().large_purchase_threshold
    )


@lru_cache()
def get_conflict_resolver() -> "ConflictResolver":
    """Get conflict resolver with the configured amount bound."""
    from finsync.application.services.conflict_resolver import ConflictResolver

    return ConflictResolver(
        max_transaction_amount=get_settings().max_transaction_amount
    )


@lru_cache()
def get_retry_policy() -> "RetryPolicy":
    """Get aggregator retry policy from settings."""
    from finsync.domain.value_objects.retry_policy import RetryPolicy

    settings = get_settings()
    return RetryPolicy(
        max_attempts=settings.retry_max_attempts,
        base_delay=settings.retry_base_delay_seconds,
        max_delay=settings.retry_max_delay_seconds,
        jitter=settings.retry_jitter,
    )
