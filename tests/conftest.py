"""Pytest configuration and shared test helpers.

Provides:
1. Custom markers (unit, integration)
2. Factories for Transaction entities and remote snapshots
3. A scripted fake aggregator client
4. A recording event bus
"""

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any
from unittest.mock import MagicMock
from uuid import UUID

import pytest
from uuid_extensions import uuid7

from finsync.core.result import Failure, Result, Success
from finsync.domain.entities.transaction import Transaction
from finsync.domain.enums import CategorySource
from finsync.domain.errors import AggregatorError
from finsync.domain.events.base_event import DomainEvent
from finsync.domain.value_objects.remote_transaction import (
    AccountInfo,
    RemoteTransactionSnapshot,
    TransactionPage,
)

FIXED_NOW = datetime(2025, 12, 1, 12, 0, tzinfo=UTC)


# Pytest markers for different test types
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line(
        "markers", "integration: Integration tests with a real database"
    )


# =============================================================================
# Entity factories
# =============================================================================


def create_transaction(
    *,
    account_id: UUID | None = None,
    external_id: str = "ext-1",
    amount: Decimal = Decimal("-45.00"),
    description: str = "Card purchase",
    merchant_name: str | None = "Walmart",
    category: str | None = "Groceries",
    category_source: CategorySource = CategorySource.SYSTEM,
    pending: bool = False,
    transaction_date: date = date(2025, 11, 28),
    last_modified_at: datetime = FIXED_NOW,
    notes: str | None = None,
    id: UUID | None = None,
) -> Transaction:
    """Helper to create a Transaction for testing."""
    return Transaction(
        id=id or uuid7(),
        external_id=external_id,
        account_id=account_id or uuid7(),
        amount=amount,
        description=description,
        merchant_name=merchant_name,
        category=category,
        category_source=category_source,
        pending=pending,
        transaction_date=transaction_date,
        last_modified_at=last_modified_at,
        last_synced_at=last_modified_at,
        notes=notes,
    )


def create_remote(
    *,
    account_id: UUID,
    external_id: str | None = "ext-1",
    amount: Any = "-45.00",
    description: str = "Card purchase",
    merchant_name: str | None = "Walmart",
    category: str | None = None,
    pending: bool = False,
    transaction_date: date | None = date(2025, 11, 28),
    last_modified_at: datetime | None = None,
) -> RemoteTransactionSnapshot:
    """Helper to create a RemoteTransactionSnapshot for testing."""
    return RemoteTransactionSnapshot(
        external_id=external_id,
        account_id=account_id,
        amount=amount,
        description=description,
        merchant_name=merchant_name,
        pending=pending,
        transaction_date=transaction_date,
        category=category,
        last_modified_at=last_modified_at,
    )


# =============================================================================
# Fakes
# =============================================================================


@dataclass
class FakeAggregator:
    """Scripted AggregatorProtocol implementation.

    ``pages`` are served in order using their index as the page token.
    ``failures`` are returned (one per call) before any page is served.
    """

    pages: list[list[RemoteTransactionSnapshot]] = field(default_factory=list)
    failures: deque[AggregatorError] = field(default_factory=deque)
    metadata_failures: deque[AggregatorError] = field(default_factory=deque)
    is_active: bool = True
    transaction_calls: list[dict[str, Any]] = field(default_factory=list)
    metadata_calls: int = 0

    @classmethod
    def with_records(
        cls, records: Iterable[RemoteTransactionSnapshot], **kwargs: Any
    ) -> "FakeAggregator":
        return cls(pages=[list(records)], **kwargs)

    async def fetch_transactions(
        self,
        account_id: UUID,
        *,
        since: date,
        page_token: str | None = None,
    ) -> Result[TransactionPage, AggregatorError]:
        self.transaction_calls.append(
            {"account_id": account_id, "since": since, "page_token": page_token}
        )
        if self.failures:
            return Failure(error=self.failures.popleft())

        index = int(page_token) if page_token is not None else 0
        records = self.pages[index] if index < len(self.pages) else []
        next_token = str(index + 1) if index + 1 < len(self.pages) else None
        return Success(
            value=TransactionPage(records=list(records), next_page_token=next_token)
        )

    async def fetch_account_metadata(
        self,
        account_id: UUID,
    ) -> Result[AccountInfo, AggregatorError]:
        self.metadata_calls += 1
        if self.metadata_failures:
            return Failure(error=self.metadata_failures.popleft())
        return Success(
            value=AccountInfo(
                account_id=account_id,
                name="Everyday Checking",
                institution_name="First Bank",
                account_type="checking",
                is_active=self.is_active,
            )
        )


class RecordingEventBus:
    """EventBusProtocol implementation that keeps every published event."""

    def __init__(self) -> None:
        self.events: list[DomainEvent] = []

    def subscribe(self, event_type, handler) -> None:  # pragma: no cover
        raise NotImplementedError

    async def publish(self, event: DomainEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: type[DomainEvent]) -> list[DomainEvent]:
        return [e for e in self.events if isinstance(e, event_type)]


def create_mock_logger() -> MagicMock:
    """Logger mock whose bind() returns itself."""
    logger = MagicMock()
    logger.bind.return_value = logger
    return logger


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def account_id() -> UUID:
    """Fixed account ID for tests."""
    return uuid7()


@pytest.fixture
def mock_logger() -> MagicMock:
    """Mock LoggerProtocol."""
    return create_mock_logger()


@pytest.fixture
def event_bus() -> RecordingEventBus:
    """Recording event bus."""
    return RecordingEventBus()
