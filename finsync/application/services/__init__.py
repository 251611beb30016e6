"""Application services.

Usage:
    from finsync.application.services import CategoryClassifier, ConflictResolver
"""

from finsync.application.services.category_classifier import CategoryClassifier
from finsync.application.services.conflict_resolver import ConflictResolver

__all__ = ["CategoryClassifier", "ConflictResolver"]
