"""
Database configuration.

Manages engine creation and the session factory. The API lifespan owns one
Database instance; there is no module-level engine.
"""
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from larder.data.models import Base
from larder.settings.sections import DatabaseSettings


logger = logging.getLogger(__name__)


class Database:
    """
    Engine + session factory pair.

    Created once per process (or per test) and injected wherever a unit of
    work is needed.
    """

    def __init__(self, settings: Optional[DatabaseSettings] = None, engine: Optional[AsyncEngine] = None):
        self.settings = settings or DatabaseSettings()
        self.engine = engine or create_engine(self.settings)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def init(self) -> None:
        """
        Initialize database.

        Creates all tables if they don't exist.
        """
        logger.info("Initializing database...")

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("✅ Database initialized successfully")

    async def close(self) -> None:
        """Close database connections."""
        logger.info("Closing database connections...")
        await self.engine.dispose()
        logger.info("✅ Database connections closed")


# =============================================================================
# ENGINE CREATION
# =============================================================================

def create_engine(settings: DatabaseSettings) -> AsyncEngine:
    """
    Create async SQLAlchemy engine.

    Returns:
        Configured async engine
    """
    logger.info(f"Creating database engine: {settings.database_url.split('@')[-1]}")

    if settings.is_sqlite:
        return create_async_engine(settings.database_url, echo=settings.echo_sql)

    return create_async_engine(
        settings.database_url,
        echo=settings.echo_sql,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        pool_recycle=settings.pool_recycle,
        pool_pre_ping=True,  # Test connections before using
    )
