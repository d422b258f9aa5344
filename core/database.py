"""
SQLAlchemy engine and session factory for the audit record store
"""

import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db.models import Base

logger = logging.getLogger(__name__)


def _normalize_url(database_url: str) -> str:
    # The worker uses sync sessions; accept the async driver URLs the API may be configured with
    if database_url.startswith("postgresql+asyncpg://"):
        return database_url.replace("postgresql+asyncpg://", "postgresql+psycopg2://", 1)
    if database_url.startswith("sqlite+aiosqlite://"):
        return database_url.replace("sqlite+aiosqlite://", "sqlite://", 1)
    return database_url


def create_db_engine(database_url: str, create_tables: bool = False) -> Engine:
    """
    Create the engine shared by every job handled in this process.

    Args:
        database_url: SQLAlchemy URL of the record store
        create_tables: Create missing tables (used for SQLite and tests)

    Returns:
        Engine with pre-ping enabled
    """
    url = _normalize_url(database_url)

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            # Single shared connection so every session sees the same in-memory database
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)
    else:
        engine = create_engine(
            url,
            pool_size=5,
            max_overflow=5,
            pool_timeout=30,
            pool_pre_ping=True,
            pool_recycle=3600,
        )

    if create_tables:
        Base.metadata.create_all(engine)

    logger.info(f"🗄️  Record store engine created ({engine.url.get_backend_name()})")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def dispose_engine(engine: Optional[Engine]):
    """Close pooled connections, logging instead of raising"""
    if engine is None:
        return
    try:
        engine.dispose()
        logger.info("Record store connections closed")
    except Exception as e:
        logger.warning(f"⚠️  Error closing record store connections: {str(e)}")
