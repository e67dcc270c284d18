"""
Asynchronous Database Utilities Module

This module owns the SQLAlchemy asyncio engine used by the user attribute
repository. The engine is created lazily on first use so importing the
package (for example from tests) never requires a reachable database.

**Security Note**: Never log DATABASE_URL, it contains the password. Use a
least-privilege database account; the service only needs read/write access
to the ``user_attributes`` table.

Key Components:
    - get_engine: The process-wide async engine for PostgreSQL (asyncpg).
    - get_session_factory: Factory for `AsyncSession` objects.
    - get_async_db: FastAPI dependency yielding a session.
    - check_database_health: Connectivity probe used by the health endpoint.
    - create_async_db_and_tables: Creates the SQLModel tables.
    - dispose_engine: Closes the connection pool on shutdown.
"""

import time
from typing import AsyncGenerator, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from recovery_guard.core.config.settings import settings

logger = structlog.get_logger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            settings.DATABASE_URL,
            echo=settings.DEBUG,
            pool_size=settings.POSTGRES_POOL_SIZE,
            max_overflow=settings.POSTGRES_MAX_OVERFLOW,
            pool_timeout=settings.POSTGRES_POOL_TIMEOUT,
            pool_pre_ping=True,
        )
        logger.debug("async_database_engine_created")
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(bind=get_engine(), class_=AsyncSession, expire_on_commit=False)
    return _session_factory


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields an AsyncSession.

    The transaction is rolled back if the request handler raises, and the
    session is always closed.

    Yields:
        AsyncSession: An asynchronous database session.
    """
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:  # noqa: BLE001 - any error must roll the transaction back
            await session.rollback()
            logger.error("async_database_session_rollback")
            raise


async def check_database_health() -> bool:
    """
    Executes ``SELECT 1`` to verify database connectivity.

    Returns:
        bool: True if the database answered, False otherwise.
    """
    start_time = time.time()
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.error(
            "database_health_check_failed",
            error=str(e),
            execution_time=time.time() - start_time,
        )
        return False
    logger.debug("database_health_check_success", execution_time=time.time() - start_time)
    return True


async def create_async_db_and_tables() -> None:
    """Creates all SQLModel tables that do not exist yet."""
    start_time = time.time()
    async with get_engine().begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info(
        "database_tables_created",
        execution_time=time.time() - start_time,
        tables=list(SQLModel.metadata.tables.keys()),
    )


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.debug("async_database_engine_disposed")
    _engine = None
    _session_factory = None
