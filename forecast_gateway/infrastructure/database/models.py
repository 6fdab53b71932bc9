"""SQLAlchemy ORM models for accounts and recurring cash flows"""

from sqlalchemy import Column, String, Boolean, Float, DateTime, Date, Integer, ForeignKey, Text, JSON
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class BankAccount(Base):
    """Linked bank account with its last synced balance"""

    __tablename__ = "bank_account"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    display_name = Column(Text, nullable=True)
    current = Column(Float, nullable=True)
    available = Column(Float, nullable=True)
    main_paycheck_recurring_transaction_id = Column(Integer, nullable=True)
    banking_data_source = Column(String(32), nullable=False, default="PLAID")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    deleted = Column(DateTime(timezone=True), nullable=True)

    recurring_transactions = relationship("RecurringTransaction", back_populates="bank_account")


class RecurringTransaction(Base):
    """Recurring income or expense with its schedule rule"""

    __tablename__ = "recurring_transaction"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bank_account_id = Column(Integer, ForeignKey("bank_account.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    user_display_name = Column(Text, nullable=False)
    transaction_display_name = Column(Text, nullable=False)
    user_amount = Column(Float, nullable=False)
    interval = Column(String(32), nullable=False)
    params = Column(JSON, nullable=False)
    roll_direction = Column(Integer, nullable=False, default=0)
    dtstart = Column(Date, nullable=True)
    status = Column(String(32), nullable=False, default="VALID")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    deleted = Column(DateTime(timezone=True), nullable=True)

    bank_account = relationship("BankAccount", back_populates="recurring_transactions")
    expected_transactions = relationship("ExpectedTransaction", back_populates="recurring_transaction")


class ExpectedTransaction(Base):
    """Stored prediction for one occurrence of a recurring transaction"""

    __tablename__ = "expected_transaction"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bank_account_id = Column(Integer, ForeignKey("bank_account.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, nullable=False)
    recurring_transaction_id = Column(
        Integer, ForeignKey("recurring_transaction.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type = Column(String(16), nullable=False)
    display_name = Column(Text, nullable=False)
    expected_amount = Column(Float, nullable=False)
    expected_date = Column(Date, nullable=False)
    pending_date = Column(Date, nullable=True)
    settled_date = Column(Date, nullable=True)
    bank_transaction_id = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    deleted = Column(DateTime(timezone=True), nullable=True)

    recurring_transaction = relationship("RecurringTransaction", back_populates="expected_transactions")


class UserAppVersion(Base):
    """Last app version a user was seen on"""

    __tablename__ = "user_app_version"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    app_version = Column(Text, nullable=False)
    device_type = Column(Text, nullable=False)
    is_current = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
