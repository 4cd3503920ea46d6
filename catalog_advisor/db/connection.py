"""
Database Connection Management
==============================

Async engine and session lifecycle using SQLAlchemy AsyncIO with asyncpg.
The API initializes the manager in its lifespan and closes it on shutdown;
request handlers get sessions through ``get_session``.
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from catalog_advisor.config.settings import Settings, get_settings
from catalog_advisor.db.models import Base
from catalog_advisor.utils.errors import DatabaseError
from catalog_advisor.utils.logger import get_logger

logger = get_logger(__name__)


class DatabaseManager:
    """
    Owns the async engine and the session factory.

    One manager per process; ``initialize`` is idempotent.
    """

    _engine: AsyncEngine | None = None
    _session_factory: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    async def initialize(cls, settings: Settings | None = None) -> None:
        """
        Create the connection pool (and the tables when ``db_auto_create``).

        Raises:
            DatabaseError: If the engine cannot be created or reached
        """
        if cls._engine is not None:
            logger.debug("db.already_initialized")
            return

        settings = settings or get_settings()

        try:
            logger.info(
                "db.initializing",
                pool_min=settings.db_pool_min,
                pool_max=settings.db_pool_max,
            )
            engine = create_async_engine(
                settings.database_url,
                echo=False,
                pool_size=settings.db_pool_min,
                max_overflow=max(settings.db_pool_max - settings.db_pool_min, 0),
                pool_recycle=3600,
                pool_pre_ping=True,
            )

            if settings.db_auto_create:
                async with engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
                logger.info("db.tables_ensured", tables=sorted(Base.metadata.tables))

        except (SQLAlchemyError, OSError) as e:
            logger.error("db.initialize_failed", error=str(e))
            raise DatabaseError(
                "Database initialization failed",
                details={"error": str(e)},
                remediation="Check DATABASE_URL and that PostgreSQL is running.",
            ) from e

        cls._engine = engine
        cls._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info("db.initialized")

    @classmethod
    async def close(cls) -> None:
        """Dispose of the connection pool. Safe to call when not initialized."""
        if cls._engine is None:
            return

        await cls._engine.dispose()
        cls._engine = None
        cls._session_factory = None
        logger.info("db.closed")

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._session_factory is not None

    @classmethod
    @asynccontextmanager
    async def get_session(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Yield a session that commits on success and rolls back on error.

        Usage:
            async with DatabaseManager.get_session() as session:
                products = await ProductRepository(session).list()
        """
        if cls._session_factory is None:
            raise DatabaseError(
                "Database not initialized",
                details={"hint": "Call DatabaseManager.initialize() first"},
            )

        async with cls._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error("db.session_rolled_back", error=str(e))
                raise

    @classmethod
    async def health_check(cls) -> dict[str, Any]:
        """
        Check database connectivity.

        Returns:
            ``{"status": "healthy", "latency_ms": 1.2}`` or an error status
        """
        if cls._engine is None:
            return {"status": "not_initialized"}

        start = time.perf_counter()
        try:
            async with cls._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            return {"status": "unhealthy", "error": str(e)}

        return {
            "status": "healthy",
            "latency_ms": round((time.perf_counter() - start) * 1000, 2),
        }


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a transactional session."""
    async with DatabaseManager.get_session() as session:
        yield session
