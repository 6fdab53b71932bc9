"""Database session management with connection pooling"""

from functools import lru_cache
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from forecast_gateway.config import settings


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Pooled engine, created on first use so importing the app needs no database driver"""
    if settings.database_url.startswith("sqlite"):
        return create_engine(settings.database_url, connect_args={"check_same_thread": False})

    return create_engine(
        settings.database_url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=10,
        max_overflow=10,
        pool_recycle=3600,
    )


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def get_db() -> Iterator[Session]:
    """Dependency injection for database sessions (read-only forecasts never commit)"""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
