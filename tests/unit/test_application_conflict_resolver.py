"""Unit tests for ConflictResolver.

Covers:
- CREATE / UPDATE / NO_OP / REJECT decisions
- User-owned fields (USER category, notes) surviving merges
- Conflict reporting for stale remote markers
- Validation of malformed remote records
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import UUID

import pytest
from uuid_extensions import uuid7

from finsync.application.services.category_classifier import CategoryClassifier
from finsync.application.services.conflict_resolver import ConflictResolver
from finsync.domain.enums import CategorySource, RejectReason
from finsync.domain.value_objects.merge_decision import (
    CreateDecision,
    NoOpDecision,
    RejectDecision,
    UpdateDecision,
)
from tests.conftest import FIXED_NOW, create_remote, create_transaction

LATER = FIXED_NOW + timedelta(hours=1)


@pytest.fixture
def resolver() -> ConflictResolver:
    return ConflictResolver()


# =============================================================================
# CREATE
# =============================================================================


@pytest.mark.unit
class TestCreate:
    """Tests for records without a local counterpart."""

    def test_new_record_creates_transaction(self, resolver, account_id):
        new_id = uuid7()
        resolver = ConflictResolver(id_factory=lambda: new_id)
        remote = create_remote(account_id=account_id, amount="-12.34")

        decision = resolver.merge(None, remote, now=FIXED_NOW, account_id=account_id)

        assert isinstance(decision, CreateDecision)
        txn = decision.transaction
        assert txn.id == new_id
        assert txn.external_id == "ext-1"
        assert txn.account_id == account_id
        assert txn.amount == Decimal("-12.34")
        assert txn.category is None
        assert txn.category_source == CategorySource.SYSTEM
        assert txn.last_modified_at == FIXED_NOW
        assert txn.last_synced_at == FIXED_NOW

    def test_remote_category_is_normalized(self, resolver, account_id):
        remote = create_remote(account_id=account_id, category="  Travel  ")

        decision = resolver.merge(None, remote, now=FIXED_NOW, account_id=account_id)

        assert decision.transaction.category == "Travel"

    def test_overlong_remote_category_is_truncated(self, resolver, account_id):
        remote = create_remote(account_id=account_id, category="x" * 150)

        decision = resolver.merge(None, remote, now=FIXED_NOW, account_id=account_id)

        assert decision.transaction.category == "x" * 100

    def test_external_id_is_stripped(self, resolver, account_id):
        remote = create_remote(account_id=account_id, external_id="  ext-9 ")

        decision = resolver.merge(None, remote, now=FIXED_NOW, account_id=account_id)

        assert decision.transaction.external_id == "ext-9"

    def test_amount_at_maximum_is_accepted(self, resolver, account_id):
        remote = create_remote(account_id=account_id, amount="-1000000")

        decision = resolver.merge(None, remote, now=FIXED_NOW, account_id=account_id)

        assert isinstance(decision, CreateDecision)


# =============================================================================
# NO_OP and idempotence
# =============================================================================


@pytest.mark.unit
class TestNoOp:
    """Tests for remote snapshots that match local state."""

    def test_identical_snapshot_is_noop(self, resolver, account_id):
        local = create_transaction(account_id=account_id)
        remote = create_remote(account_id=account_id)

        decision = resolver.merge(local, remote, now=LATER, account_id=account_id)

        assert isinstance(decision, NoOpDecision)
        assert decision.transaction is local
        assert not decision.has_conflicts

    def test_remerging_created_and_classified_record_is_noop(self, resolver, account_id):
        classifier = CategoryClassifier()
        remote = create_remote(account_id=account_id)

        created = resolver.merge(None, remote, now=FIXED_NOW, account_id=account_id)
        stored = created.transaction.with_system_category(
            classifier.classify(created.transaction)
        )
        again = resolver.merge(stored, remote, now=LATER, account_id=account_id)

        assert isinstance(again, NoOpDecision)

    def test_equal_amounts_with_different_scale_are_noop(self, resolver, account_id):
        local = create_transaction(account_id=account_id, amount=Decimal("-45.0000"))
        remote = create_remote(account_id=account_id, amount=-45)

        decision = resolver.merge(local, remote, now=LATER, account_id=account_id)

        assert isinstance(decision, NoOpDecision)

    def test_sub_unit_amount_rounded_to_stored_scale(self, resolver, account_id):
        remote = create_remote(account_id=account_id, amount="-45.12345")

        created = resolver.merge(None, remote, now=FIXED_NOW, account_id=account_id)

        assert created.transaction.amount == Decimal("-45.1235")

    def test_resyncing_sub_unit_amount_is_noop(self, resolver, account_id):
        stored = create_transaction(account_id=account_id, amount=Decimal("-45.1235"))
        remote = create_remote(account_id=account_id, amount="-45.12345")

        decision = resolver.merge(stored, remote, now=LATER, account_id=account_id)

        assert isinstance(decision, NoOpDecision)


# =============================================================================
# UPDATE
# =============================================================================


@pytest.mark.unit
class TestUpdate:
    """Tests for merges that change local state."""

    def test_pending_to_settled_with_new_amount(self, resolver, account_id):
        local = create_transaction(
            account_id=account_id, pending=True, amount=Decimal("-45.00")
        )
        remote = create_remote(account_id=account_id, pending=False, amount="-47.10")

        decision = resolver.merge(local, remote, now=LATER, account_id=account_id)

        assert isinstance(decision, UpdateDecision)
        assert set(decision.changed_fields) == {"pending", "amount"}
        assert decision.transaction.amount == Decimal("-47.10")
        assert decision.transaction.pending is False
        assert decision.transaction.category == "Groceries"
        assert decision.transaction.last_modified_at == LATER
        assert decision.transaction.last_synced_at == LATER
        assert decision.previous is local

    def test_user_category_survives_remote_category(self, resolver, account_id):
        local = create_transaction(
            account_id=account_id,
            category="Travel",
            category_source=CategorySource.USER,
        )
        remote = create_remote(
            account_id=account_id, amount="-50.00", category="Groceries"
        )

        decision = resolver.merge(local, remote, now=LATER, account_id=account_id)

        assert isinstance(decision, UpdateDecision)
        assert decision.transaction.category == "Travel"
        assert decision.transaction.category_source == CategorySource.USER
        assert decision.transaction.amount == Decimal("-50.00")
        [conflict] = decision.conflicts
        assert conflict.field == "category"
        assert conflict.winner == "user"
        assert conflict.local_value == "Travel"
        assert conflict.remote_value == "Groceries"

    def test_user_category_conflict_without_core_changes_is_noop(
        self, resolver, account_id
    ):
        local = create_transaction(
            account_id=account_id,
            category="Travel",
            category_source=CategorySource.USER,
        )
        remote = create_remote(account_id=account_id, category="Groceries")

        decision = resolver.merge(local, remote, now=LATER, account_id=account_id)

        assert isinstance(decision, NoOpDecision)
        assert decision.has_conflicts

    def test_notes_are_kept(self, resolver, account_id):
        local = create_transaction(account_id=account_id, notes="split with Sam")
        remote = create_remote(account_id=account_id, amount="-60.00")

        decision = resolver.merge(local, remote, now=LATER, account_id=account_id)

        assert decision.transaction.notes == "split with Sam"

    def test_system_category_follows_remote_category(self, resolver, account_id):
        local = create_transaction(account_id=account_id, category="Groceries")
        remote = create_remote(account_id=account_id, category="Shopping")

        decision = resolver.merge(local, remote, now=LATER, account_id=account_id)

        assert isinstance(decision, UpdateDecision)
        assert decision.changed_fields == ("category",)
        assert decision.transaction.category == "Shopping"

    def test_changed_merchant_clears_system_category(self, resolver, account_id):
        local = create_transaction(account_id=account_id, merchant_name="Walmart")
        remote = create_remote(account_id=account_id, merchant_name="Starbucks")

        decision = resolver.merge(local, remote, now=LATER, account_id=account_id)

        assert isinstance(decision, UpdateDecision)
        assert decision.transaction.category is None
        assert decision.transaction.needs_classification()

    def test_amount_change_keeps_system_category(self, resolver, account_id):
        local = create_transaction(account_id=account_id)
        remote = create_remote(account_id=account_id, amount="-99.00")

        decision = resolver.merge(local, remote, now=LATER, account_id=account_id)

        assert decision.transaction.category == "Groceries"

    def test_last_modified_never_moves_backwards(self, resolver, account_id):
        local = create_transaction(account_id=account_id, last_modified_at=LATER)
        remote = create_remote(account_id=account_id, amount="-1.00")

        decision = resolver.merge(local, remote, now=FIXED_NOW, account_id=account_id)

        assert decision.transaction.last_modified_at == LATER


# =============================================================================
# Conflicts on core fields
# =============================================================================


@pytest.mark.unit
class TestCoreFieldConflicts:
    """Remote values win; stale remote markers are reported as conflicts."""

    def test_stale_remote_marker_reports_conflict(self, resolver, account_id):
        local = create_transaction(account_id=account_id, last_modified_at=LATER)
        remote = create_remote(
            account_id=account_id, amount="-10.00", last_modified_at=FIXED_NOW
        )

        decision = resolver.merge(local, remote, now=LATER, account_id=account_id)

        assert isinstance(decision, UpdateDecision)
        assert decision.transaction.amount == Decimal("-10.00")
        [conflict] = decision.conflicts
        assert conflict.field == "amount"
        assert conflict.winner == "remote"
        assert conflict.local_value == Decimal("-45.00")

    def test_newer_remote_marker_is_not_a_conflict(self, resolver, account_id):
        local = create_transaction(account_id=account_id, last_modified_at=FIXED_NOW)
        remote = create_remote(
            account_id=account_id, amount="-10.00", last_modified_at=LATER
        )

        decision = resolver.merge(local, remote, now=LATER, account_id=account_id)

        assert not decision.has_conflicts

    def test_naive_remote_marker_compared_as_utc(self, resolver, account_id):
        local = create_transaction(account_id=account_id, last_modified_at=LATER)
        remote = create_remote(
            account_id=account_id,
            amount="-10.00",
            last_modified_at=datetime(2025, 12, 1, 12, 0),
        )

        decision = resolver.merge(local, remote, now=LATER, account_id=account_id)

        assert decision.has_conflicts


# =============================================================================
# REJECT
# =============================================================================


@pytest.mark.unit
class TestReject:
    """Malformed remote records become RejectDecision, never exceptions."""

    @pytest.mark.parametrize("external_id", [None, "", "   "])
    def test_missing_external_id(self, resolver, account_id, external_id):
        remote = create_remote(account_id=account_id, external_id=external_id)

        decision = resolver.merge(None, remote, now=FIXED_NOW, account_id=account_id)

        assert isinstance(decision, RejectDecision)
        assert decision.reason == RejectReason.MISSING_EXTERNAL_ID
        assert decision.external_id == ""

    def test_account_mismatch(self, resolver, account_id):
        remote = create_remote(account_id=uuid7())

        decision = resolver.merge(None, remote, now=FIXED_NOW, account_id=account_id)

        assert isinstance(decision, RejectDecision)
        assert decision.reason == RejectReason.ACCOUNT_MISMATCH

    def test_account_mismatch_against_local_record(self, resolver, account_id):
        local = create_transaction(account_id=account_id)
        remote = create_remote(account_id=uuid7())

        decision = resolver.merge(local, remote, now=FIXED_NOW)

        assert decision.reason == RejectReason.ACCOUNT_MISMATCH

    def test_missing_transaction_date(self, resolver, account_id):
        remote = create_remote(account_id=account_id, transaction_date=None)

        decision = resolver.merge(None, remote, now=FIXED_NOW, account_id=account_id)

        assert decision.reason == RejectReason.MISSING_TRANSACTION_DATE

    @pytest.mark.parametrize("amount", [None, "", "abc", "NaN", "-Infinity", True])
    def test_malformed_amount(self, resolver, account_id, amount):
        remote = create_remote(account_id=account_id, amount=amount)

        decision = resolver.merge(None, remote, now=FIXED_NOW, account_id=account_id)

        assert isinstance(decision, RejectDecision)
        assert decision.reason == RejectReason.MALFORMED_AMOUNT
        assert decision.external_id == "ext-1"

    def test_amount_out_of_range(self, resolver, account_id):
        remote = create_remote(account_id=account_id, amount="1000000.01")

        decision = resolver.merge(None, remote, now=FIXED_NOW, account_id=account_id)

        assert decision.reason == RejectReason.AMOUNT_OUT_OF_RANGE

    def test_custom_amount_bound(self, account_id):
        resolver = ConflictResolver(max_transaction_amount=Decimal("100"))
        remote = create_remote(account_id=account_id, amount="-100.01")

        decision = resolver.merge(None, remote, now=FIXED_NOW, account_id=account_id)

        assert decision.reason == RejectReason.AMOUNT_OUT_OF_RANGE

    def test_reject_keeps_local_untouched(self, resolver, account_id):
        local = create_transaction(account_id=account_id)
        remote = create_remote(account_id=account_id, amount="garbage")

        decision = resolver.merge(local, remote, now=LATER, account_id=account_id)

        assert isinstance(decision, RejectDecision)
        assert local.amount == Decimal("-45.00")


def test_transaction_date_type_is_preserved(account_id: UUID):
    decision = ConflictResolver().merge(
        None,
        create_remote(account_id=account_id, transaction_date=date(2024, 2, 29)),
        now=FIXED_NOW,
        account_id=account_id,
    )

    assert decision.transaction.transaction_date == date(2024, 2, 29)
