"""Pydantic schemas for API responses"""

from pydantic import BaseModel
from typing import List, Optional


class OccurredTransactionSchema(BaseModel):
    """Bank transaction already matched to a recurring expense"""

    id: int
    bank_account_id: int
    amount: float
    transaction_date: str
    display_name: str
    external_name: Optional[str] = None
    pending: bool = False


class ForecastItemSchema(BaseModel):
    """Expected recurring income or expense inside the forecast window"""

    id: Optional[int] = None
    amount: float
    date: str
    display_name: str
    user_friendly_name: str
    recurring_schedule_id: int
    occurred_transaction: Optional[OccurredTransactionSchema] = None


class PendingItemSchema(BaseModel):
    id: int
    amount: float
    date: str
    display_name: str
    user_friendly_name: str


class ForecastResponse(BaseModel):
    """Response for GET /v1/bank-accounts/{bank_account_id}/forecast"""

    user_id: int
    bank_account_id: int
    start_balance: float
    lowest_balance: float
    start: str
    stop: str
    paycheck: Optional[ForecastItemSchema] = None
    recurring: List[ForecastItemSchema]
    pending: List[PendingItemSchema]
    show_available_to_spend: bool = True
