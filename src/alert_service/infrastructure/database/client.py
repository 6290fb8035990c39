"""Database client for SQLite/PostgreSQL connections."""

import asyncio
import logging
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from alert_service.config import settings
from .models import Base

logger = logging.getLogger(__name__)


class DatabaseClient:
    """Async database client for SQLAlchemy."""

    def __init__(self, database_url: Optional[str] = None):
        """Initialize database engine and session factory."""
        self.database_url = database_url or settings.database_url

        # For SQLite, use NullPool to avoid connection issues
        # For PostgreSQL, use default pool
        engine_kwargs = {"echo": settings.log_level == "DEBUG"}
        if "sqlite" in self.database_url:
            engine_kwargs["poolclass"] = NullPool

        self.engine = create_async_engine(self.database_url, **engine_kwargs)

        self.async_session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        logger.info(f"Database client initialized with URL: {self.database_url}")

    async def verify_connection(self, attempts: int = 5, initial_delay: float = 1.0):
        """Verify database connection with retry logic.

        Retries with exponential backoff so the service can start before the
        database container is ready.
        """
        delay = initial_delay
        for attempt in range(1, attempts + 1):
            try:
                async with self.engine.begin() as conn:
                    await conn.execute(text("SELECT 1"))
                logger.info("Database connection verified")
                return
            except OperationalError as e:
                if attempt == attempts:
                    raise
                logger.warning(
                    f"Database not reachable (attempt {attempt}/{attempts}): {e}; "
                    f"retrying in {delay:.1f}s"
                )
                await asyncio.sleep(delay)
                delay *= 2

    async def create_tables(self):
        """Create all database tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get database session for dependency injection."""
        async with self.async_session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def close(self):
        """Close database engine."""
        await self.engine.dispose()
        logger.info("Database client closed")


# Global database client instance
db_client = DatabaseClient()
