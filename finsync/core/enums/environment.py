"""Runtime environment types.

Used by Settings to pick environment-specific behavior (log rendering,
lock and rate-limit backends).

Environments:
- DEVELOPMENT: Local development, human-readable logs
- TESTING: Automated test execution with in-memory backends
- CI: Continuous integration
- PRODUCTION: Deployed worker fleet (Redis locks, Postgres store)
"""

from enum import Enum


class Environment(str, Enum):
    """Runtime environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    CI = "ci"
    PRODUCTION = "production"
