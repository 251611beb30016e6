"""AggregatorProtocol for financial data aggregator clients.

Port (interface) for hexagonal architecture. The infrastructure layer (or the
embedding application) implements this protocol for a concrete aggregator
(Plaid-like). The wire protocol itself lives outside finsync.

Methods return Result types following the railway-oriented pattern. A client
classifies every failure as either ``AggregatorTransientError`` (timeout,
5xx, rate limited) or ``AggregatorFatalError`` (authentication, permission,
invalid account); the resilient boundary relies on that split.
"""

from datetime import date
from typing import Protocol
from uuid import UUID

from finsync.core.result import Result
from finsync.domain.errors import AggregatorError
from finsync.domain.value_objects.remote_transaction import (
    AccountInfo,
    TransactionPage,
)


class AggregatorProtocol(Protocol):
    """Protocol for aggregator clients.

    Implementations:
        - ResilientAggregatorClient: retry + rate gate wrapper around any
          other implementation.
        - Concrete API clients supplied by the embedding application.
    """

    async def fetch_transactions(
        self,
        account_id: UUID,
        *,
        since: date,
        page_token: str | None = None,
    ) -> Result[TransactionPage, AggregatorError]:
        """Fetch one page of transactions.

        Args:
            account_id: Account to fetch transactions for.
            since: Earliest transaction date to include.
            page_token: Cursor from the previous page; None for the first page.

        Returns:
            Success(TransactionPage): Records plus the next cursor (None on
                the last page).
            Failure(AggregatorTransientError | AggregatorFatalError)
        """
        ...

    async def fetch_account_metadata(
        self,
        account_id: UUID,
    ) -> Result[AccountInfo, AggregatorError]:
        """Fetch account metadata.

        Args:
            account_id: Account to describe.

        Returns:
            Success(AccountInfo) or Failure(AggregatorError).
        """
        ...
