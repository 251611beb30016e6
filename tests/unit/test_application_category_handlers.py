"""Unit tests for SetTransactionCategoryHandler and ClearTransactionCategoryHandler.

Tests cover:
- Successful override and clear
- Category validation
- Unknown transaction
- Store save failure
- Event publishing
"""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from uuid_extensions import uuid7

from finsync.application.commands import (
    ClearTransactionCategory,
    SetTransactionCategory,
)
from finsync.application.commands.handlers.clear_transaction_category_handler import (
    ClearTransactionCategoryHandler,
)
from finsync.application.commands.handlers.set_transaction_category_handler import (
    SetTransactionCategoryHandler,
)
from finsync.application.services.category_classifier import CategoryClassifier
from finsync.core.enums import ErrorCode
from finsync.core.errors import ValidationError
from finsync.core.result import Failure, Success
from finsync.domain.enums import CategorySource
from finsync.domain.errors import StoreWriteError, TransactionNotFoundError
from finsync.domain.events import TransactionCategoryChanged
from finsync.infrastructure.persistence.repositories.in_memory_store import (
    InMemoryTransactionStore,
)
from tests.conftest import FIXED_NOW, create_transaction

LATER = FIXED_NOW + timedelta(hours=2)


@pytest.fixture
def store() -> InMemoryTransactionStore:
    return InMemoryTransactionStore()


@pytest.fixture
def set_handler(store, event_bus, mock_logger) -> SetTransactionCategoryHandler:
    return SetTransactionCategoryHandler(
        store, event_bus, mock_logger, clock=lambda: LATER
    )


@pytest.fixture
def clear_handler(store, event_bus, mock_logger) -> ClearTransactionCategoryHandler:
    return ClearTransactionCategoryHandler(
        store, CategoryClassifier(), event_bus, mock_logger, clock=lambda: LATER
    )


def failing_store(existing):
    store = AsyncMock()
    store.find_by_id.return_value = existing
    store.save.return_value = Failure(
        error=StoreWriteError(code=ErrorCode.STORE_WRITE_FAILED, message="db down")
    )
    return store


# =============================================================================
# SetTransactionCategory
# =============================================================================


@pytest.mark.unit
class TestSetTransactionCategory:
    """Tests for user category overrides."""

    async def test_sets_user_category(self, set_handler, store, event_bus):
        txn = create_transaction()
        await store.save(txn)

        result = await set_handler.handle(
            SetTransactionCategory(transaction_id=txn.id, category="  Travel  ")
        )

        assert isinstance(result, Success)
        stored = await store.find_by_id(txn.id)
        assert stored.category == "Travel"
        assert stored.category_source == CategorySource.USER
        assert stored.last_modified_at == LATER

        (event,) = event_bus.of_type(TransactionCategoryChanged)
        assert event.transaction_id == txn.id
        assert event.old_category == "Groceries"
        assert event.new_category == "Travel"
        assert event.category_source == "user"

    async def test_overwrites_existing_override(self, set_handler, store):
        txn = create_transaction(category="Travel", category_source=CategorySource.USER)
        await store.save(txn)

        result = await set_handler.handle(
            SetTransactionCategory(transaction_id=txn.id, category="Dining")
        )

        assert result.value.category == "Dining"

    @pytest.mark.parametrize("category", ["", "   ", "x" * 101])
    async def test_invalid_category_rejected(
        self, set_handler, store, event_bus, category
    ):
        txn = create_transaction()
        await store.save(txn)

        result = await set_handler.handle(
            SetTransactionCategory(transaction_id=txn.id, category=category)
        )

        assert isinstance(result, Failure)
        assert isinstance(result.error, ValidationError)
        assert result.error.code == ErrorCode.INVALID_CATEGORY
        assert result.error.field == "category"
        assert (await store.find_by_id(txn.id)).category == "Groceries"
        assert event_bus.events == []

    async def test_category_at_max_length_accepted(self, set_handler, store):
        txn = create_transaction()
        await store.save(txn)

        result = await set_handler.handle(
            SetTransactionCategory(transaction_id=txn.id, category="x" * 100)
        )

        assert isinstance(result, Success)

    async def test_unknown_transaction(self, set_handler):
        result = await set_handler.handle(
            SetTransactionCategory(transaction_id=uuid7(), category="Travel")
        )

        assert isinstance(result, Failure)
        assert isinstance(result.error, TransactionNotFoundError)
        assert result.error.code == ErrorCode.TRANSACTION_NOT_FOUND

    async def test_save_failure_returned(self, event_bus, mock_logger):
        handler = SetTransactionCategoryHandler(
            failing_store(create_transaction()), event_bus, mock_logger
        )

        result = await handler.handle(
            SetTransactionCategory(transaction_id=uuid7(), category="Travel")
        )

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.STORE_WRITE_FAILED
        assert event_bus.events == []
        mock_logger.error.assert_called_once()


# =============================================================================
# ClearTransactionCategory
# =============================================================================


@pytest.mark.unit
class TestClearTransactionCategory:
    """Tests for dropping user overrides."""

    async def test_clear_reclassifies(self, clear_handler, store, event_bus):
        txn = create_transaction(category="Travel", category_source=CategorySource.USER)
        await store.save(txn)

        result = await clear_handler.handle(
            ClearTransactionCategory(transaction_id=txn.id)
        )

        assert isinstance(result, Success)
        stored = await store.find_by_id(txn.id)
        assert stored.category == "Groceries"
        assert stored.category_source == CategorySource.SYSTEM

        (event,) = event_bus.of_type(TransactionCategoryChanged)
        assert event.old_category == "Travel"
        assert event.new_category == "Groceries"
        assert event.category_source == "system"

    async def test_clear_without_override_is_noop(
        self, clear_handler, store, event_bus
    ):
        txn = create_transaction()
        await store.save(txn)

        result = await clear_handler.handle(
            ClearTransactionCategory(transaction_id=txn.id)
        )

        assert result == Success(value=txn)
        assert event_bus.events == []

    async def test_unknown_transaction(self, clear_handler):
        result = await clear_handler.handle(
            ClearTransactionCategory(transaction_id=uuid7())
        )

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.TRANSACTION_NOT_FOUND

    async def test_save_failure_returned(self, event_bus, mock_logger):
        existing = create_transaction(
            category="Travel", category_source=CategorySource.USER
        )
        handler = ClearTransactionCategoryHandler(
            failing_store(existing), CategoryClassifier(), event_bus, mock_logger
        )

        result = await handler.handle(
            ClearTransactionCategory(transaction_id=existing.id)
        )

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.STORE_WRITE_FAILED
        assert event_bus.events == []
