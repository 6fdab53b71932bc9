"""Transaction store HTTP client for fetching bank transactions"""

import httpx
from datetime import date
from typing import Any, Dict, List, Optional
from forecast_gateway.domain.models import ObservedTransaction
from forecast_gateway.domain.exceptions import InvalidTransactionDataError, TransactionStoreError
from forecast_gateway.infrastructure.observability.metrics import transaction_store_failures_counter
from forecast_gateway.config import settings

PENDING = "PENDING"


class TransactionStoreClient:
    """Client for the external bank transaction service"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.transaction_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_bank_transactions(
        self,
        bank_account_id: int,
        status: Optional[str] = None,
        since: Optional[date] = None,
        until: Optional[date] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[ObservedTransaction]:
        """
        Fetch transactions for an account, optionally filtered by status and date.

        Raises:
            TransactionStoreError: On timeout, HTTP errors, or invalid response
        """
        params: Dict[str, Any] = {}
        if status:
            params["status"] = status
        if since:
            params["since"] = since.isoformat()
        if until:
            params["until"] = until.isoformat()
        if limit:
            params["limit"] = limit
            params["offset"] = offset

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/bank-accounts/{bank_account_id}/transactions",
                    params=params,
                )
                response.raise_for_status()
                data = response.json()

                return [
                    ObservedTransaction(
                        id=txn["id"],
                        bank_account_id=txn.get("bank_account_id", bank_account_id),
                        amount=float(txn["amount"]),
                        transaction_date=date.fromisoformat(txn["transaction_date"]),
                        display_name=txn["display_name"],
                        external_name=txn.get("external_name"),
                        pending=txn.get("status") == PENDING,
                    )
                    for txn in data.get("transactions", [])
                ]

            except httpx.TimeoutException as e:
                transaction_store_failures_counter.inc()
                raise TransactionStoreError(f"Transaction store timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                transaction_store_failures_counter.inc()
                raise TransactionStoreError(f"Transaction store error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                transaction_store_failures_counter.inc()
                raise TransactionStoreError(f"Transaction store unreachable: {e}") from e
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                transaction_store_failures_counter.inc()
                raise InvalidTransactionDataError(f"Invalid transaction data from store: {e}") from e

    async def get_pending_transactions(self, bank_account_id: int, since: date) -> List[ObservedTransaction]:
        return await self.get_bank_transactions(bank_account_id, status=PENDING, since=since)

    async def get_batched_recent_transactions(
        self,
        bank_account_id: int,
        since: date,
        batch_size: int | None = None,
    ) -> List[ObservedTransaction]:
        """Page through every transaction since a date; a short page ends the scan"""
        batch_size = batch_size or settings.transaction_batch_size
        transactions: List[ObservedTransaction] = []
        offset = 0

        while True:
            page = await self.get_bank_transactions(bank_account_id, since=since, limit=batch_size, offset=offset)
            transactions.extend(page)
            if len(page) < batch_size:
                return transactions
            offset += batch_size
