"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from forecast_gateway.domain.forecast import ForecastEngine
from forecast_gateway.infrastructure.clients.transactions import TransactionStoreClient
from forecast_gateway.infrastructure.database.repositories import AccountStore, RecurringStore
from forecast_gateway.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_transaction_client() -> TransactionStoreClient:
    """Provide transaction store client instance"""
    return TransactionStoreClient()


def get_forecast_engine(
    db: Session = Depends(get_db),
    transaction_client: TransactionStoreClient = Depends(get_transaction_client),
) -> ForecastEngine:
    """Forecast engine wired to the database and transaction store"""
    return ForecastEngine(
        accounts=AccountStore(db),
        recurring=RecurringStore(db, transaction_client),
        transactions=transaction_client,
    )
