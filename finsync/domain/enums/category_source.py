"""Category provenance enum."""

from enum import Enum


class CategorySource(str, Enum):
    """Who assigned a transaction's category.

    SYSTEM: Assigned by the classifier or copied from aggregator data.
        May be replaced on re-sync.
    USER: Explicit user choice. Never overwritten by the classifier or by
        remote data; only an explicit clear returns it to SYSTEM.
    """

    SYSTEM = "system"
    USER = "user"
