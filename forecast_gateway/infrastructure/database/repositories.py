"""Data access layer for accounts and recurring cash flows"""

from datetime import date, timedelta
from typing import List, Optional
from sqlalchemy.orm import Session
from forecast_gateway.infrastructure.database.models import (
    BankAccount,
    ExpectedTransaction,
    RecurringTransaction,
    UserAppVersion,
)
from forecast_gateway.domain.models import (
    AccountSnapshot,
    BankingDataSource,
    ExpectedOccurrence,
    ObservedTransaction,
    RecurringScheduleItem,
    TransactionType,
)
from forecast_gateway.domain.schedule import ScheduleRule

# Internal accounts report balances that already net out pending debits
EXCLUDES_PENDING_SOURCES = {BankingDataSource.BANK_OF_DAVE.value}


def to_schedule_item(row: RecurringTransaction) -> RecurringScheduleItem:
    return RecurringScheduleItem(
        id=row.id,
        bank_account_id=row.bank_account_id,
        type=TransactionType.from_amount(row.user_amount),
        display_name=row.user_display_name,
        transaction_display_name=row.transaction_display_name,
        expected_amount=row.user_amount,
        schedule=ScheduleRule.from_params(
            row.interval,
            row.params,
            roll_direction=row.roll_direction or 0,
            weekly_start=row.dtstart,
        ),
    )


def to_expected_occurrence(row: ExpectedTransaction) -> ExpectedOccurrence:
    return ExpectedOccurrence(
        id=row.id,
        recurring_schedule_id=row.recurring_transaction_id,
        bank_account_id=row.bank_account_id,
        type=TransactionType(row.type),
        display_name=row.display_name,
        expected_date=row.expected_date,
        expected_amount=row.expected_amount,
        pending_date=row.pending_date,
        settled_date=row.settled_date,
    )


def project_occurrence(item: RecurringScheduleItem, expected_date: date) -> ExpectedOccurrence:
    """Occurrence predicted from the schedule that has no stored row yet"""
    return ExpectedOccurrence(
        id=None,
        recurring_schedule_id=item.id,
        bank_account_id=item.bank_account_id,
        type=item.type,
        display_name=item.display_name,
        expected_date=expected_date,
        expected_amount=item.expected_amount,
    )


class BankAccountRepository:
    """Repository for bank accounts"""

    def __init__(self, db: Session):
        self.db = db

    def get_snapshot(self, bank_account_id: int) -> Optional[AccountSnapshot]:
        """Current state of an account, or None if missing or deleted"""
        account = (
            self.db.query(BankAccount)
            .filter(BankAccount.id == bank_account_id, BankAccount.deleted.is_(None))
            .first()
        )
        if account is None:
            return None

        return AccountSnapshot(
            id=account.id,
            user_id=account.user_id,
            current_balance=account.current or 0,
            main_income_schedule_id=account.main_paycheck_recurring_transaction_id,
            excludes_pending_from_projection=account.banking_data_source in EXCLUDES_PENDING_SOURCES,
        )


class RecurringTransactionRepository:
    """Repository for recurring transactions and their expected occurrences"""

    def __init__(self, db: Session):
        self.db = db

    def _active(self):
        return self.db.query(RecurringTransaction).filter(RecurringTransaction.deleted.is_(None))

    def get_by_id(self, recurring_transaction_id: int) -> Optional[RecurringScheduleItem]:
        row = self._active().filter(RecurringTransaction.id == recurring_transaction_id).first()
        return to_schedule_item(row) if row else None

    def get_by_account_id(self, bank_account_id: int) -> List[RecurringScheduleItem]:
        rows = (
            self._active()
            .filter(
                RecurringTransaction.bank_account_id == bank_account_id,
                RecurringTransaction.status == "VALID",
            )
            .order_by(RecurringTransaction.id)
            .all()
        )
        return [to_schedule_item(row) for row in rows]

    def get_stored_expected(
        self,
        bank_account_id: int,
        start: date,
        stop: date,
        recurring_transaction_id: Optional[int] = None,
    ) -> List[ExpectedOccurrence]:
        query = self.db.query(ExpectedTransaction).filter(
            ExpectedTransaction.bank_account_id == bank_account_id,
            ExpectedTransaction.expected_date >= start,
            ExpectedTransaction.expected_date <= stop,
            ExpectedTransaction.deleted.is_(None),
        )
        if recurring_transaction_id is not None:
            query = query.filter(ExpectedTransaction.recurring_transaction_id == recurring_transaction_id)

        rows = query.order_by(ExpectedTransaction.expected_date, ExpectedTransaction.id).all()
        return [to_expected_occurrence(row) for row in rows]

    def get_expected_by_account_id(
        self,
        bank_account_id: int,
        start: date,
        stop: date,
        as_of: Optional[date] = None,
    ) -> List[ExpectedOccurrence]:
        """
        Expected occurrences within [start, stop].

        Stored predictions win; schedule dates without a stored row are
        projected so new recurring transactions show up before the nightly
        prediction job has run. Only dates on or after as_of are projected:
        an earlier date without a stored row has no pending/settled marker,
        and the current balance may already include it.
        """
        stored = self.get_stored_expected(bank_account_id, start, stop)
        seen = {(occurrence.recurring_schedule_id, occurrence.expected_date) for occurrence in stored}

        project_from = max(start, as_of) if as_of else start
        projected = []
        if project_from <= stop:
            projected = [
                project_occurrence(item, expected_date)
                for item in self.get_by_account_id(bank_account_id)
                for expected_date in item.schedule.between(project_from, stop, inclusive=True)
                if (item.id, expected_date) not in seen
            ]

        return sorted(stored + projected, key=lambda o: (o.expected_date, o.recurring_schedule_id))

    def get_next_expected_paycheck(
        self,
        bank_account_id: int,
        main_paycheck_recurring_transaction_id: Optional[int],
        as_of: date,
    ) -> Optional[ExpectedOccurrence]:
        """Next paycheck of the account's main income on or after as_of"""
        if main_paycheck_recurring_transaction_id is None:
            return None

        income = self.get_by_id(main_paycheck_recurring_transaction_id)
        if income is None or income.bank_account_id != bank_account_id:
            return None

        next_date = income.schedule.after(as_of, inclusive=True)
        stored = self.get_stored_expected(
            bank_account_id,
            as_of,
            next_date,
            recurring_transaction_id=income.id,
        )
        if stored:
            return stored[0]

        return project_occurrence(income, next_date)


class UserAppVersionRepository:
    """Repository for the app versions users were last seen on"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_user_id(self, user_id: int) -> Optional[UserAppVersion]:
        return (
            self.db.query(UserAppVersion)
            .filter(UserAppVersion.user_id == user_id, UserAppVersion.is_current.is_(True))
            .order_by(UserAppVersion.created_at.desc(), UserAppVersion.id.desc())
            .first()
        )


class AccountStore:
    """Async view over BankAccountRepository for the forecast engine"""

    def __init__(self, db: Session):
        self.repository = BankAccountRepository(db)

    async def get_snapshot(self, bank_account_id: int) -> Optional[AccountSnapshot]:
        return self.repository.get_snapshot(bank_account_id)


class RecurringStore:
    """
    Recurring-transaction collaborator for the forecast engine.

    Schedules and expected occurrences come from the database; paycheck
    observations come from the transaction store client.
    """

    def __init__(self, db: Session, transaction_client):
        self.repository = RecurringTransactionRepository(db)
        self.transaction_client = transaction_client

    async def get_by_id(self, recurring_transaction_id: int) -> Optional[RecurringScheduleItem]:
        return self.repository.get_by_id(recurring_transaction_id)

    async def get_expected_transactions_by_account_id(
        self,
        bank_account_id: int,
        start: date,
        stop: date,
        as_of: Optional[date] = None,
    ) -> List[ExpectedOccurrence]:
        return self.repository.get_expected_by_account_id(bank_account_id, start, stop, as_of=as_of)

    async def get_next_expected_paycheck_for_account(
        self,
        bank_account_id: int,
        main_paycheck_recurring_transaction_id: Optional[int],
        as_of: date,
    ) -> Optional[ExpectedOccurrence]:
        return self.repository.get_next_expected_paycheck(
            bank_account_id,
            main_paycheck_recurring_transaction_id,
            as_of,
        )

    async def get_matching_bank_transactions(
        self,
        item: RecurringScheduleItem,
        as_of: date,
        lookback_days: int,
    ) -> List[ObservedTransaction]:
        """Transactions within the lookback that look like this recurring item, newest first"""
        transactions = await self.transaction_client.get_bank_transactions(
            item.bank_account_id,
            since=as_of - timedelta(days=lookback_days),
            until=as_of,
        )
        matches = [
            transaction
            for transaction in transactions
            if transaction.display_name == item.transaction_display_name
            and TransactionType.from_amount(transaction.amount) is item.type
        ]
        return sorted(matches, key=lambda t: t.transaction_date, reverse=True)
