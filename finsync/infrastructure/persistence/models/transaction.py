"""Transaction database model.

Architecture:
    - (account_id, external_id) unique: one local row per aggregator record
    - Amount stored as Numeric with a separate currency column
    - category_source stored as lowercase string (system, user)
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from finsync.core.constants import CATEGORY_MAX_LENGTH
from finsync.infrastructure.persistence.base import BaseMutableModel


class TransactionModel(BaseMutableModel):
    """Transaction row.

    Indexes:
        - ix_transactions_account_id: account lookup
        - ix_transactions_transaction_date: date range queries
        - uq_transactions_account_external: unique (account_id, external_id)
    """

    __tablename__ = "transactions"
    __table_args__ = (
        UniqueConstraint(
            "account_id", "external_id", name="uq_transactions_account_external"
        ),
    )

    account_id: Mapped[UUID] = mapped_column(
        Uuid,
        nullable=False,
        index=True,
        comment="Owning account",
    )
    external_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Aggregator transaction identifier",
    )

    # =========================================================================
    # Aggregator-owned facts
    # =========================================================================

    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=19, scale=4),
        nullable=False,
        comment="Signed amount (negative = debit)",
    )
    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        default="USD",
    )
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    merchant_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pending: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    # =========================================================================
    # Categorization and user data
    # =========================================================================

    category: Mapped[str | None] = mapped_column(
        String(CATEGORY_MAX_LENGTH), nullable=True
    )
    category_source: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="system",
        comment="system or user",
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # =========================================================================
    # Sync timestamps
    # =========================================================================

    last_modified_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    last_synced_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
