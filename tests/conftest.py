"""Pytest fixtures for testing"""

import pytest
from datetime import date, timedelta
from typing import Dict, Generator, List, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from forecast_gateway.api.main import create_app
from forecast_gateway.infrastructure.database.models import Base
from forecast_gateway.infrastructure.database.session import get_db
from forecast_gateway.domain.models import (
    AccountSnapshot,
    ExpectedOccurrence,
    ObservedTransaction,
    RecurringScheduleItem,
    TransactionType,
)


# Test database
TEST_DATABASE_URL = "sqlite://"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# A Monday, so weekday arithmetic in tests is easy to follow
TODAY = date(2024, 3, 11)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


class FakeAccounts:
    def __init__(self, snapshots: Optional[Dict[int, AccountSnapshot]] = None):
        self.snapshots = snapshots or {}

    async def get_snapshot(self, bank_account_id: int) -> Optional[AccountSnapshot]:
        return self.snapshots.get(bank_account_id)


class FakeRecurring:
    """In-memory recurring-transaction collaborator that records what it was asked"""

    def __init__(
        self,
        expected: Optional[List[ExpectedOccurrence]] = None,
        schedules: Optional[Dict[int, RecurringScheduleItem]] = None,
        next_paycheck: Optional[ExpectedOccurrence] = None,
        matches: Optional[List[ObservedTransaction]] = None,
    ):
        self.expected = expected or []
        self.schedules = schedules or {}
        self.next_paycheck = next_paycheck
        self.matches = matches or []
        self.calls: List[tuple] = []

    async def get_by_id(self, recurring_schedule_id: int) -> Optional[RecurringScheduleItem]:
        return self.schedules.get(recurring_schedule_id)

    async def get_next_expected_paycheck_for_account(self, bank_account_id, main_schedule_id, as_of):
        self.calls.append(("next_paycheck", bank_account_id, main_schedule_id, as_of))
        return self.next_paycheck

    async def get_expected_transactions_by_account_id(self, bank_account_id, start, stop, as_of=None):
        self.calls.append(("expected", bank_account_id, start, stop, as_of))
        return [o for o in self.expected if start <= o.expected_date <= stop]

    async def get_matching_bank_transactions(self, item, as_of, lookback_days):
        self.calls.append(("matching", item.id, as_of, lookback_days))
        return list(self.matches)


class FakeTransactions:
    def __init__(
        self,
        pending: Optional[List[ObservedTransaction]] = None,
        recent: Optional[List[ObservedTransaction]] = None,
    ):
        self.pending = pending or []
        self.recent = recent or []
        self.calls: List[tuple] = []

    async def get_pending_transactions(self, bank_account_id, since):
        self.calls.append(("pending", bank_account_id, since))
        return list(self.pending)

    async def get_batched_recent_transactions(self, bank_account_id, since):
        self.calls.append(("recent", bank_account_id, since))
        return [t for t in self.recent if t.transaction_date >= since]


def make_occurrence(
    amount: float,
    expected_date: date,
    display_name: str = "Recurring",
    recurring_schedule_id: int = 1,
    occurrence_id: Optional[int] = 1,
    settled_date: Optional[date] = None,
    pending_date: Optional[date] = None,
    bank_account_id: int = 1,
) -> ExpectedOccurrence:
    return ExpectedOccurrence(
        id=occurrence_id,
        recurring_schedule_id=recurring_schedule_id,
        bank_account_id=bank_account_id,
        type=TransactionType.from_amount(amount),
        display_name=display_name,
        expected_date=expected_date,
        expected_amount=amount,
        pending_date=pending_date,
        settled_date=settled_date,
    )


def make_transaction(
    amount: float,
    transaction_date: date,
    transaction_id: int = 1,
    display_name: str = "Transaction",
    external_name: Optional[str] = "NAME",
    pending: bool = False,
    bank_account_id: int = 1,
) -> ObservedTransaction:
    return ObservedTransaction(
        id=transaction_id,
        bank_account_id=bank_account_id,
        amount=amount,
        transaction_date=transaction_date,
        display_name=display_name,
        external_name=external_name,
        pending=pending,
    )


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def account() -> AccountSnapshot:
    return AccountSnapshot(id=1, user_id=10, current_balance=300.0)


@pytest.fixture
def recent_pending(today: date) -> List[ObservedTransaction]:
    """One pending debit and one pending credit from yesterday"""
    yesterday = today - timedelta(days=1)
    return [
        make_transaction(-100.0, yesterday, transaction_id=1, display_name="Grocery", pending=True),
        make_transaction(100.0, yesterday, transaction_id=2, display_name="Refund", pending=True),
    ]
