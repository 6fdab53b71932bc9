"""
Balance alerts derived from consecutive forecasts.

The forecast route keeps no history, so it does not classify alerts. These
functions are meant for the job that refreshes forecasts after a bank sync,
which holds the account's previous forecast and passes it in with the one
ForecastEngine just computed. That job lives outside this service.
"""

from enum import Enum
from typing import Optional

from forecast_gateway.domain.models import ForecastResult


class ForecastAlert(str, Enum):
    BANK_ACCOUNT_OVERDRAWN = "bank account overdrawn"
    OVERDRAFT_PENDING = "bank account overdraft pending"
    POTENTIAL_OVERDRAFT = "potential overdraft identified"
    SAFETY_NET_BREACHED = "safety net breached"


def compute_balance_after_pending(forecast: ForecastResult, balance_includes_pending: bool) -> float:
    """Start balance with pending debits applied when the institution leaves them out"""
    if balance_includes_pending:
        return forecast.start_balance
    return forecast.start_balance + sum(item.amount for item in forecast.pending if item.amount < 0)


def classify_forecast_alert(
    new_forecast: ForecastResult,
    last_forecast: Optional[ForecastResult],
    balance_after_pending: float,
    low_balance_threshold: Optional[float] = None,
) -> Optional[ForecastAlert]:
    """
    Pick the alert a new forecast should raise, if any.

    Rules are checked in order and the first match wins:
    1. Balance went negative since the last forecast
    2. Pending debits will take the balance negative
    3. The projection dips below zero before the next paycheck
    4. Balance fell through the user's low balance threshold

    Each rule only fires on the transition, so a user who was already
    overdrawn last time is not alerted again.
    """
    if last_forecast is None:
        return None

    if new_forecast.start_balance < 0 and last_forecast.start_balance > 0:
        return ForecastAlert.BANK_ACCOUNT_OVERDRAWN

    if balance_after_pending < 0 and last_forecast.lowest_balance > 0:
        return ForecastAlert.OVERDRAFT_PENDING

    if new_forecast.lowest_balance < 0 and last_forecast.lowest_balance > 0:
        return ForecastAlert.POTENTIAL_OVERDRAFT

    if (
        low_balance_threshold
        and new_forecast.start_balance < low_balance_threshold
        and last_forecast.start_balance > low_balance_threshold
    ):
        return ForecastAlert.SAFETY_NET_BREACHED

    return None
