"""Conflict resolver: merges one remote snapshot into local state.

Decides, per remote record, whether to CREATE, UPDATE, do nothing (NO_OP),
or REJECT. Pure apart from identifier generation: it reads no store and
writes nothing; the orchestrator applies the decisions.

Merge policy:
    - Aggregator-owned core fields (amount, description, merchant_name,
      pending, transaction_date, currency) always take the remote value.
    - A USER category is never changed. A SYSTEM category follows the
      remote category when one is supplied, and is cleared for
      re-classification when the description or merchant changed.
    - notes are user-owned and always kept.
    - Amounts are rounded half-up to four decimal places, the stored scale,
      so a re-fetched amount compares equal to the stored one.
    - Conflicts are reported, never blocking: core fields resolve to remote
      (also when the remote marker is not newer than the local edit), the
      category resolves to the user.
"""

from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from uuid_extensions import uuid7

from finsync.core.constants import (
    AMOUNT_QUANTUM,
    CATEGORY_MAX_LENGTH,
    MAX_TRANSACTION_AMOUNT_DEFAULT,
)
from finsync.domain.entities.transaction import Transaction
from finsync.domain.enums import CategorySource, RejectReason
from finsync.domain.value_objects.merge_decision import (
    CreateDecision,
    FieldConflict,
    MergeDecision,
    NoOpDecision,
    RejectDecision,
    UpdateDecision,
)
from finsync.domain.value_objects.remote_transaction import RemoteTransactionSnapshot

CORE_FIELDS: tuple[str, ...] = (
    "amount",
    "description",
    "merchant_name",
    "pending",
    "transaction_date",
    "currency",
)
"""Fields owned by the aggregator, refreshed on every merge."""

_RECLASSIFY_FIELDS = frozenset({"description", "merchant_name"})


class ConflictResolver:
    """Three-way merge of remote snapshots into local transactions.

    Example:
        >>> resolver = ConflictResolver()
        >>> decision = resolver.merge(local, remote, now=now)
        >>> match decision:
        ...     case UpdateDecision(transaction=txn):
        ...         ...
    """

    def __init__(
        self,
        *,
        max_transaction_amount: Decimal = MAX_TRANSACTION_AMOUNT_DEFAULT,
        id_factory: Callable[[], UUID] = uuid7,
    ) -> None:
        """Initialize resolver.

        Args:
            max_transaction_amount: Absolute amount above which records are
                rejected.
            id_factory: Generates ids for created transactions.
        """
        self._max_amount = max_transaction_amount
        self._id_factory = id_factory

    def merge(
        self,
        local: Transaction | None,
        remote: RemoteTransactionSnapshot,
        *,
        now: datetime,
        account_id: UUID | None = None,
    ) -> MergeDecision:
        """Decide how a remote snapshot changes local state.

        Never raises for malformed remote data; such records become
        RejectDecision.

        Args:
            local: Stored transaction with the same (account_id, external_id),
                or None.
            remote: Snapshot from the aggregator.
            now: Current time (used for last_modified_at/last_synced_at).
            account_id: Account being synced. Remote records filed under a
                different account are rejected.

        Returns:
            One of CreateDecision, UpdateDecision, NoOpDecision, RejectDecision.
        """
        external_id = (remote.external_id or "").strip()
        if not external_id:
            return _reject("", RejectReason.MISSING_EXTERNAL_ID, "missing external id")

        expected_account = account_id or (local.account_id if local else None)
        if expected_account is not None and remote.account_id != expected_account:
            return _reject(
                external_id,
                RejectReason.ACCOUNT_MISMATCH,
                f"record belongs to account {remote.account_id}, "
                f"expected {expected_account}",
            )

        if remote.transaction_date is None:
            return _reject(
                external_id,
                RejectReason.MISSING_TRANSACTION_DATE,
                "missing transaction date",
            )

        amount = _parse_amount(remote.amount)
        if amount is None:
            return _reject(
                external_id,
                RejectReason.MALFORMED_AMOUNT,
                f"malformed amount: {remote.amount!r}",
            )
        if abs(amount) > self._max_amount:
            return _reject(
                external_id,
                RejectReason.AMOUNT_OUT_OF_RANGE,
                f"amount {amount} exceeds maximum {self._max_amount}",
            )
        amount = amount.quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP)

        incoming: dict[str, Any] = {
            "amount": amount,
            "description": remote.description or "",
            "merchant_name": remote.merchant_name or None,
            "pending": bool(remote.pending),
            "transaction_date": remote.transaction_date,
            "currency": (remote.currency or "USD").upper(),
        }
        remote_category = _normalize_category(remote.category)

        if local is None:
            return CreateDecision(
                transaction=Transaction(
                    id=self._id_factory(),
                    external_id=external_id,
                    account_id=remote.account_id,
                    category=remote_category,
                    category_source=CategorySource.SYSTEM,
                    last_modified_at=now,
                    last_synced_at=now,
                    **incoming,
                )
            )

        return self._merge_existing(local, remote, incoming, remote_category, now)

    def _merge_existing(
        self,
        local: Transaction,
        remote: RemoteTransactionSnapshot,
        incoming: dict[str, Any],
        remote_category: str | None,
        now: datetime,
    ) -> UpdateDecision | NoOpDecision:
        changed = [name for name in CORE_FIELDS if getattr(local, name) != incoming[name]]
        conflicts: list[FieldConflict] = []

        if remote.last_modified_at is not None and _as_utc(
            remote.last_modified_at
        ) <= _as_utc(local.last_modified_at):
            conflicts.extend(
                FieldConflict(
                    field=name,
                    local_value=getattr(local, name),
                    remote_value=incoming[name],
                    winner="remote",
                )
                for name in changed
            )

        category = local.category
        if local.is_user_categorized():
            if remote_category is not None and remote_category != local.category:
                conflicts.append(
                    FieldConflict(
                        field="category",
                        local_value=local.category,
                        remote_value=remote_category,
                        winner="user",
                    )
                )
        elif remote_category is not None:
            category = remote_category
        elif _RECLASSIFY_FIELDS.intersection(changed):
            category = None

        if category != local.category:
            changed.append("category")

        needs_category = category is None and not local.is_user_categorized()
        if not changed and not needs_category:
            return NoOpDecision(transaction=local, conflicts=tuple(conflicts))

        merged = replace(
            local, category=category, last_synced_at=now, **incoming
        ).touched(now)
        return UpdateDecision(
            transaction=merged,
            previous=local,
            changed_fields=tuple(changed),
            conflicts=tuple(conflicts),
        )


def _reject(external_id: str, reason: RejectReason, message: str) -> RejectDecision:
    return RejectDecision(external_id=external_id, reason=reason, message=message)


def _parse_amount(value: Any) -> Decimal | None:
    """Parse a raw aggregator amount; None when malformed or non-finite."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None
    return amount if amount.is_finite() else None


def _normalize_category(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value[:CATEGORY_MAX_LENGTH] or None


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are treated as UTC.
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value
