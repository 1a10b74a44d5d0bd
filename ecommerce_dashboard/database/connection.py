"""
Database Connection Management

Async SQLite store handle built on SQLAlchemy 2.0 and aiosqlite.

The handle is owned explicitly: whoever creates a `Database` initialises it,
passes it to the loader or query service, and closes it. The API keeps its
instance on `app.state` for the lifetime of the application.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from ecommerce_dashboard.config import get_settings
from ecommerce_dashboard.database.models import Base

logger = structlog.get_logger(__name__)


class Database:
    """
    Owned handle on the SQLite store.

    Example:
        database = Database("sqlite+aiosqlite:///./ecommerce.db")
        await database.init()
        try:
            async with database.connect() as conn:
                result = await conn.execute(query)
        finally:
            await database.close()
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None

    @classmethod
    def from_settings(cls) -> "Database":
        """Build a handle for the configured database file"""
        settings = get_settings()
        return cls(settings.database.async_url, echo=settings.database.echo)

    async def init(self) -> AsyncEngine:
        """
        Create the engine and verify the store is reachable.

        Returns:
            AsyncEngine: The initialized database engine
        """
        if self._engine is not None:
            logger.warning("Database already initialized", url=self.url)
            return self._engine

        # One aiosqlite connection per checkout; each is bound to the
        # event loop that opened it
        self._engine = create_async_engine(
            self.url,
            echo=self.echo,
            future=True,
            poolclass=NullPool,
        )

        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            logger.info("Database connection established", url=self.url)
        except Exception as e:
            logger.error("Failed to connect to database", url=self.url, error=str(e))
            await self._engine.dispose()
            self._engine = None
            raise

        return self._engine

    async def close(self) -> None:
        """Dispose of the engine and all its connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            logger.info("Database connection closed", url=self.url)

    @property
    def engine(self) -> AsyncEngine:
        """
        Get the database engine.

        Raises:
            RuntimeError: If the handle has not been initialized
        """
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self._engine

    @asynccontextmanager
    async def connect(self) -> AsyncGenerator[AsyncConnection, None]:
        """Read-only connection, released on exit."""
        async with self.engine.connect() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncConnection, None]:
        """
        Connection inside a transaction.

        Commits when the block exits normally, rolls back and re-raises
        otherwise.
        """
        async with self.engine.begin() as conn:
            try:
                yield conn
            except Exception as e:
                logger.error(
                    "Transaction failed, rolling back",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

    async def recreate_schema(self) -> None:
        """Drop every table of the schema and create it again, empty."""
        async with self.transaction() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Schema recreated", tables=sorted(Base.metadata.tables))

    async def existing_tables(self) -> list:
        """Names of the schema tables present in the store"""
        async with self.connect() as conn:
            names = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        return [name for name in names if name in Base.metadata.tables]

    async def check_health(self) -> dict:
        """
        Check database health status.

        Returns:
            dict: Health status with latency information
        """
        try:
            start = time.perf_counter()
            async with self.connect() as conn:
                await conn.execute(text("SELECT 1"))
            latency_ms = (time.perf_counter() - start) * 1000

            return {
                "status": "healthy",
                "latency_ms": round(latency_ms, 2),
            }
        except Exception as e:
            logger.warning("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": type(e).__name__,
            }
