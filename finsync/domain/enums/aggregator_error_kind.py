"""Aggregator failure classification."""

from enum import Enum


class TransientErrorKind(str, Enum):
    """Aggregator failures worth retrying."""

    TIMEOUT = "timeout"
    SERVER_ERROR = "server_error"
    RATE_LIMITED = "rate_limited"


class FatalErrorKind(str, Enum):
    """Aggregator failures that abort a run without retry."""

    AUTHENTICATION = "authentication"
    PERMISSION = "permission"
    INVALID_ACCOUNT = "invalid_account"
