"""
Async engine and session management.

The engine is created lazily from DATABASE_URL on first use, so tests can
point the process at a throwaway database before anything connects.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from clinic_records.core.config import get_database_url, get_sql_echo, normalize_database_url

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


# Internal lazy globals
_engine: Optional[AsyncEngine] = None
_SessionLocal: Optional[async_sessionmaker[AsyncSession]] = None
_database_url: Optional[str] = None


def _enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine configured for the URL's backend."""
    database_url = normalize_database_url(database_url)
    url = make_url(database_url)

    if url.drivername.startswith("postgresql"):
        engine = create_async_engine(
            database_url,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,  # Detects and refreshes stale connections
            pool_recycle=3600,
            connect_args={
                "server_settings": {"application_name": "clinic_records"},
                "timeout": 10,  # Fail fast on connection issues
            },
            echo=echo,
        )
    elif url.drivername.startswith("sqlite"):
        if url.database in (None, "", ":memory:"):
            # One shared connection so the schema survives across sessions
            engine = create_async_engine(
                database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            engine = create_async_engine(database_url, echo=echo)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    else:
        engine = create_async_engine(database_url, echo=echo)

    logger.info(
        "Database engine created",
        extra={"context": {"dialect": engine.dialect.name, "driver": url.drivername}},
    )
    return engine


def get_engine() -> AsyncEngine:
    """Return the cached engine, rebuilding it if DATABASE_URL changed."""
    global _engine, _SessionLocal, _database_url
    database_url = get_database_url()
    if _engine is None or _database_url != database_url:
        if _engine is not None:
            # Pooled connections of the old engine are dropped with it
            _engine.sync_engine.dispose()
        _engine = build_engine(database_url, echo=get_sql_echo())
        _SessionLocal = None
        _database_url = database_url
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Return a cached sessionmaker bound to the lazy engine."""
    global _SessionLocal
    engine = get_engine()
    if _SessionLocal is None:
        _SessionLocal = async_sessionmaker(
            bind=engine, autoflush=False, expire_on_commit=False
        )
    return _SessionLocal


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield a session that is always closed afterwards."""
    session = get_sessionmaker()()
    try:
        yield session
    finally:
        await session.close()


async def create_tables(engine: Optional[AsyncEngine] = None) -> None:
    # Import models so Base.metadata is populated
    from clinic_records.db import base  # noqa: F401

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


async def drop_tables(engine: Optional[AsyncEngine] = None) -> None:
    from clinic_records.db import base  # noqa: F401

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.info("Database tables dropped")


async def dispose_engine() -> None:
    global _engine, _SessionLocal, _database_url
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _SessionLocal = None
    _database_url = None
