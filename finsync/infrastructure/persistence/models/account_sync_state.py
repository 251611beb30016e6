"""Per-account sync bookkeeping model."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from finsync.infrastructure.persistence.base import BaseMutableModel


class AccountSyncStateModel(BaseMutableModel):
    """Last successful sync per account.

    Fields:
        account_id: Account (unique).
        last_synced_at: Start time of the last successful run.
    """

    __tablename__ = "account_sync_states"

    account_id: Mapped[UUID] = mapped_column(
        Uuid,
        nullable=False,
        unique=True,
        index=True,
    )
    last_synced_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
