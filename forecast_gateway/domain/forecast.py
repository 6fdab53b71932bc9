"""Account forecast - projected low balance over the current pay period"""

import asyncio
from collections import defaultdict
from dataclasses import replace
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from forecast_gateway.config import settings
from forecast_gateway.domain.models import (
    AccountSnapshot,
    ExpectedOccurrence,
    ForecastItem,
    ForecastResult,
    ForecastWindow,
    ObservedTransaction,
    PendingItem,
    RecurringScheduleItem,
    TransactionType,
)
from forecast_gateway.domain.naming import format_display_name, format_external_name
from forecast_gateway.utils.date_utils import end_of_month, generate_date_range, start_of_month, today_in_timezone

DayBuckets = Dict[Tuple[TransactionType, date], List[ExpectedOccurrence]]


def filter_unrealized(expected: List[ExpectedOccurrence]) -> List[ExpectedOccurrence]:
    """Drop occurrences already pending/settled - the current balance includes them"""
    return [occurrence for occurrence in expected if not occurrence.is_realized]


def attach_occurred_transactions(
    expected: List[ExpectedOccurrence],
    transactions: List[ObservedTransaction],
) -> List[ExpectedOccurrence]:
    """
    Pair each occurrence with a spent transaction of the same display name.

    Display only: the pairing never changes the projected balance. When two
    occurrences share a name only the last one is paired, and the latest
    transaction in the list wins.
    """
    by_name: Dict[str, int] = {occurrence.display_name: i for i, occurrence in enumerate(expected)}
    occurred: Dict[int, ObservedTransaction] = {}

    for transaction in transactions:
        if transaction.amount < 0 and transaction.display_name in by_name:
            occurred[by_name[transaction.display_name]] = transaction

    return [
        replace(occurrence, occurred_transaction=occurred[i]) if i in occurred else occurrence
        for i, occurrence in enumerate(expected)
    ]


def bucket_by_day(expected: List[ExpectedOccurrence]) -> DayBuckets:
    buckets: DayBuckets = defaultdict(list)
    for occurrence in expected:
        buckets[(occurrence.type, occurrence.expected_date)].append(occurrence)
    return buckets


def simulate_lowest_balance(
    current_balance: float,
    window: ForecastWindow,
    buckets: DayBuckets,
    pending: List[ObservedTransaction],
    excludes_pending_from_projection: bool = False,
) -> float:
    """
    Walk the window one day at a time and return the lowest running balance.

    Each day applies expenses first and samples the balance before that day's
    income lands. Pending transactions only count on the first day.
    """
    pending_income = sum(t.amount for t in pending if t.amount > 0)
    pending_expense = sum(t.amount for t in pending if t.amount <= 0)

    accumulating_balance = current_balance
    lowest_balance = current_balance

    for day in generate_date_range(window.start, window.stop):
        accumulating_balance += sum(e.expected_amount for e in buckets.get((TransactionType.EXPENSE, day), []))

        if day == window.start and not excludes_pending_from_projection:
            accumulating_balance += pending_expense

        lowest_balance = min(lowest_balance, accumulating_balance)

        if day == window.start:
            accumulating_balance += pending_income

        accumulating_balance += sum(i.expected_amount for i in buckets.get((TransactionType.INCOME, day), []))

    return lowest_balance


def to_forecast_item(occurrence: ExpectedOccurrence) -> ForecastItem:
    return ForecastItem(
        id=occurrence.id,
        amount=occurrence.expected_amount,
        date=occurrence.expected_date,
        display_name=occurrence.display_name,
        user_friendly_name=format_display_name(occurrence.display_name),
        recurring_schedule_id=occurrence.recurring_schedule_id,
        occurred_transaction=occurrence.occurred_transaction,
    )


def to_pending_item(transaction: ObservedTransaction) -> PendingItem:
    return PendingItem(
        id=transaction.id,
        amount=transaction.amount,
        date=transaction.transaction_date,
        display_name=transaction.display_name,
        user_friendly_name=format_external_name(transaction.external_name),
    )


class ForecastEngine:
    """
    Computes the lowest balance an account is projected to reach before its
    next paycheck (or month end when no paycheck is known).

    Collaborators are duck-typed async sources:
    - accounts: get_snapshot(bank_account_id)
    - recurring: get_by_id, get_next_expected_paycheck_for_account,
      get_expected_transactions_by_account_id, get_matching_bank_transactions
    - transactions: get_pending_transactions, get_batched_recent_transactions

    Nothing is written and nothing is retried; collaborator errors propagate.
    """

    def __init__(self, accounts, recurring, transactions, timezone: str | None = None):
        self.accounts = accounts
        self.recurring = recurring
        self.transactions = transactions
        self.timezone = timezone or settings.default_timezone

    async def compute_from_bank_account_id(
        self,
        bank_account_id: int,
        start_from_pay_period: bool = False,
        today: Optional[date] = None,
    ) -> Optional[ForecastResult]:
        account = await self.accounts.get_snapshot(bank_account_id)

        # Account was deleted
        if account is None:
            return None

        return await self.compute(account, start_from_pay_period=start_from_pay_period, today=today)

    async def compute(
        self,
        account: AccountSnapshot,
        start_from_pay_period: bool = False,
        today: Optional[date] = None,
    ) -> ForecastResult:
        if today is None:
            today = today_in_timezone(self.timezone)

        # 1. Window: pending transactions and next paycheck are independent
        pending, next_paycheck = await asyncio.gather(
            self.transactions.get_pending_transactions(
                account.id,
                today - timedelta(days=settings.pending_lookback_days),
            ),
            self.recurring.get_next_expected_paycheck_for_account(
                account.id,
                account.main_income_schedule_id,
                today,
            ),
        )
        window = await self.resolve_window(today, next_paycheck, start_from_pay_period)

        # 2. Ledger for the window
        expected_all, transactions = await asyncio.gather(
            self.recurring.get_expected_transactions_by_account_id(
                account.id,
                window.start,
                window.stop,
                as_of=today,
            ),
            self.transactions.get_batched_recent_transactions(account.id, window.start),
        )

        expected = attach_occurred_transactions(filter_unrealized(expected_all), transactions)

        lowest_balance = simulate_lowest_balance(
            account.current_balance,
            window,
            bucket_by_day(expected),
            pending,
            excludes_pending_from_projection=account.excludes_pending_from_projection,
        )

        display_since = today - timedelta(days=settings.pending_display_days)
        return ForecastResult(
            user_id=account.user_id,
            bank_account_id=account.id,
            start_balance=account.current_balance,
            lowest_balance=lowest_balance,
            start=window.start,
            stop=window.stop,
            paycheck=to_forecast_item(next_paycheck) if next_paycheck else None,
            recurring=[to_forecast_item(occurrence) for occurrence in expected],
            pending=[to_pending_item(t) for t in pending if t.transaction_date >= display_since],
        )

    async def resolve_window(
        self,
        today: date,
        next_paycheck: Optional[ExpectedOccurrence],
        start_from_pay_period: bool,
    ) -> ForecastWindow:
        """Paycheck known: run to the day before the following paycheck. Otherwise to month end."""
        if next_paycheck is None:
            start = await self.previous_start_date(today, None, start_from_pay_period)
            return ForecastWindow(start=start, stop=end_of_month(start))

        income = await self.recurring.get_by_id(next_paycheck.recurring_schedule_id)
        start = await self.previous_start_date(today, income, start_from_pay_period)
        return ForecastWindow(start=start, stop=income.schedule.after(start) - timedelta(days=1))

    async def previous_start_date(
        self,
        today: date,
        income: Optional[RecurringScheduleItem],
        start_from_pay_period: bool,
    ) -> date:
        """
        Where the window starts.

        In pay period mode the start moves back to the last paycheck actually
        observed, falling back to when the schedule says it should have landed.
        """
        if not start_from_pay_period:
            return today

        if income is None:
            return start_of_month(today)

        expected_start = income.schedule.before(today)
        lookback_days = (today - expected_start).days + settings.paycheck_match_slack_days

        observations = await self.recurring.get_matching_bank_transactions(income, today, lookback_days)
        if not observations:
            return expected_start

        return max(observation.transaction_date for observation in observations)
