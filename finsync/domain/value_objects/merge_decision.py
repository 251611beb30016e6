"""MergeDecision tagged union.

The conflict resolver returns exactly one of four decision variants per
remote record. Call sites dispatch with ``match`` and end with
``assert_never`` so a new variant cannot fall through silently.

Usage:
    match decision:
        case CreateDecision(transaction=txn):
            ...
        case UpdateDecision(transaction=txn, conflicts=conflicts):
            ...
        case NoOpDecision():
            ...
        case RejectDecision(reason=reason):
            ...
        case _:
            assert_never(decision)
"""

from dataclasses import dataclass, replace
from typing import Any, Literal

from finsync.domain.entities.transaction import Transaction
from finsync.domain.enums import RejectReason


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldConflict:
    """A field on which local and remote disagreed.

    Attributes:
        field: Transaction attribute name.
        local_value: Value held locally before the merge.
        remote_value: Value reported by the aggregator.
        winner: Which side's value the merged record keeps.
    """

    field: str
    local_value: Any
    remote_value: Any
    winner: Literal["remote", "user"]


@dataclass(frozen=True, slots=True, kw_only=True)
class CreateDecision:
    """Remote record has no local counterpart; insert it."""

    transaction: Transaction

    def with_transaction(self, transaction: Transaction) -> "CreateDecision":
        """Return a copy carrying ``transaction``."""
        return replace(self, transaction=transaction)


@dataclass(frozen=True, slots=True, kw_only=True)
class UpdateDecision:
    """Local record exists and at least one field changed.

    Attributes:
        transaction: Merged record to write.
        previous: Local record before the merge.
        changed_fields: Attribute names whose values changed.
        conflicts: Disagreements resolved during the merge.
    """

    transaction: Transaction
    previous: Transaction
    changed_fields: tuple[str, ...] = ()
    conflicts: tuple[FieldConflict, ...] = ()

    @property
    def has_conflicts(self) -> bool:
        """Whether the merge resolved at least one conflict."""
        return bool(self.conflicts)

    def with_transaction(self, transaction: Transaction) -> "UpdateDecision":
        """Return a copy carrying ``transaction``."""
        return replace(self, transaction=transaction)


@dataclass(frozen=True, slots=True, kw_only=True)
class NoOpDecision:
    """Remote snapshot matches local state; nothing to write.

    Attributes:
        transaction: The unchanged local record.
        conflicts: User-owned disagreements kept in the user's favour.
    """

    transaction: Transaction
    conflicts: tuple[FieldConflict, ...] = ()

    @property
    def has_conflicts(self) -> bool:
        """Whether the merge resolved at least one conflict."""
        return bool(self.conflicts)


@dataclass(frozen=True, slots=True, kw_only=True)
class RejectDecision:
    """Remote record is malformed and was skipped.

    Attributes:
        external_id: Aggregator identifier (empty string when missing).
        reason: Machine-readable reason code.
        message: Human-readable explanation.
    """

    external_id: str
    reason: RejectReason
    message: str


type MergeDecision = CreateDecision | UpdateDecision | NoOpDecision | RejectDecision

type WriteDecision = CreateDecision | UpdateDecision
