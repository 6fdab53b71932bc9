"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from forecast_gateway.domain.schedule import ScheduleRule
from forecast_gateway.utils.date_utils import to_ymd


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"

    @classmethod
    def from_amount(cls, amount: float) -> "TransactionType":
        return cls.INCOME if amount > 0 else cls.EXPENSE


class BankingDataSource(str, Enum):
    PLAID = "PLAID"
    MX = "MX"
    BANK_OF_DAVE = "BANK_OF_DAVE"


@dataclass(frozen=True)
class AccountSnapshot:
    """Read-only view of a bank account at forecast time"""

    id: int
    user_id: int
    current_balance: float
    main_income_schedule_id: Optional[int] = None
    # Internal spending accounts already net pending debits out of their balance
    excludes_pending_from_projection: bool = False


@dataclass(frozen=True)
class RecurringScheduleItem:
    """Detected or user-confirmed repeating cash flow"""

    id: int
    bank_account_id: int
    type: TransactionType
    display_name: str
    transaction_display_name: str
    expected_amount: float
    schedule: ScheduleRule


@dataclass(frozen=True)
class ObservedTransaction:
    """Bank transaction from the transaction store"""

    id: int
    bank_account_id: int
    amount: float
    transaction_date: date
    display_name: str
    external_name: Optional[str] = None
    pending: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "bank_account_id": self.bank_account_id,
            "amount": self.amount,
            "transaction_date": to_ymd(self.transaction_date),
            "display_name": self.display_name,
            "external_name": self.external_name,
            "pending": self.pending,
        }


@dataclass(frozen=True)
class ExpectedOccurrence:
    """One predicted instance of a recurring schedule"""

    id: Optional[int]  # None when projected from the schedule but not stored
    recurring_schedule_id: int
    bank_account_id: int
    type: TransactionType
    display_name: str
    expected_date: date
    expected_amount: float
    pending_date: Optional[date] = None
    settled_date: Optional[date] = None
    occurred_transaction: Optional[ObservedTransaction] = None

    @property
    def is_realized(self) -> bool:
        """Already matched a real transaction, so the current balance reflects it"""
        return self.pending_date is not None or self.settled_date is not None


@dataclass(frozen=True)
class ForecastWindow:
    start: date
    stop: date

    def __post_init__(self):
        if self.stop < self.start:
            raise ValueError(f"Forecast window stop {self.stop} is before start {self.start}")


@dataclass(frozen=True)
class ForecastItem:
    """Plain projection of an expected occurrence"""

    id: Optional[int]
    amount: float
    date: date
    display_name: str
    user_friendly_name: str
    recurring_schedule_id: int
    occurred_transaction: Optional[ObservedTransaction] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "amount": self.amount,
            "date": to_ymd(self.date),
            "display_name": self.display_name,
            "user_friendly_name": self.user_friendly_name,
            "recurring_schedule_id": self.recurring_schedule_id,
            "occurred_transaction": self.occurred_transaction.to_dict() if self.occurred_transaction else None,
        }


@dataclass(frozen=True)
class PendingItem:
    id: int
    amount: float
    date: date
    display_name: str
    user_friendly_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "amount": self.amount,
            "date": to_ymd(self.date),
            "display_name": self.display_name,
            "user_friendly_name": self.user_friendly_name,
        }


@dataclass(frozen=True)
class ForecastResult:
    """Output of the balance projection"""

    user_id: int
    bank_account_id: int
    start_balance: float
    lowest_balance: float
    start: date
    stop: date
    paycheck: Optional[ForecastItem] = None
    recurring: List[ForecastItem] = field(default_factory=list)
    pending: List[PendingItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "bank_account_id": self.bank_account_id,
            "start_balance": self.start_balance,
            "lowest_balance": self.lowest_balance,
            "start": to_ymd(self.start),
            "stop": to_ymd(self.stop),
            "paycheck": self.paycheck.to_dict() if self.paycheck else None,
            "recurring": [item.to_dict() for item in self.recurring],
            "pending": [item.to_dict() for item in self.pending],
        }
