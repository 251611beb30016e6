"""Aggregator data transfer value objects.

Shapes returned by AggregatorProtocol implementations. They carry raw,
unvalidated aggregator data: the conflict resolver validates them and
rejects malformed records.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID


@dataclass(frozen=True, slots=True, kw_only=True)
class RemoteTransactionSnapshot:
    """One transaction as reported by the aggregator.

    Attributes:
        external_id: Aggregator transaction identifier.
        account_id: Account the aggregator filed the record under.
        amount: Raw amount (negative = debit). Unvalidated; may be a string
            or float depending on the aggregator client.
        description: Transaction description.
        merchant_name: Merchant name, if the aggregator resolved one.
        pending: Whether the transaction is still pending settlement.
        transaction_date: Date of the underlying financial event.
        category: Aggregator-assigned category label, if any.
        currency: ISO 4217 currency code.
        last_modified_at: Aggregator's own last-update marker, if reported.
        raw_data: Original payload, kept for debugging.
    """

    external_id: str | None
    account_id: UUID
    amount: Decimal | str | int | float | None
    description: str = ""
    merchant_name: str | None = None
    pending: bool = False
    transaction_date: date | None = None
    category: str | None = None
    currency: str = "USD"
    last_modified_at: datetime | None = None
    raw_data: dict[str, Any] | None = field(default=None, compare=False)


@dataclass(frozen=True, slots=True, kw_only=True)
class TransactionPage:
    """One page of aggregator transactions.

    Attributes:
        records: Snapshots in aggregator order.
        next_page_token: Cursor for the next page; None on the last page.
    """

    records: list[RemoteTransactionSnapshot]
    next_page_token: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class AccountInfo:
    """Aggregator account metadata.

    Attributes:
        account_id: Local account identifier.
        name: Display name of the account.
        institution_name: Financial institution, if known.
        account_type: Aggregator account type (depository, credit, ...).
        is_active: False when the institution reports the account closed.
    """

    account_id: UUID
    name: str
    institution_name: str | None = None
    account_type: str | None = None
    is_active: bool = True
