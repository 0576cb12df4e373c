"""Engine and session factory for the ledger database"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from armada_ledger.config import settings


def build_engine(database_url: str) -> Engine:
    """
    Create the engine for a database URL.

    Postgres gets a bounded, pre-pinged pool; SQLite (local runs and tests)
    has no pool settings and must allow use across threads.
    """
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=settings.db_pool_recycle_seconds,
    )


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Request-scoped session; the handler decides when to commit"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
