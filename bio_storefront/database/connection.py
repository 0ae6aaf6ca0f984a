"""
Database Connection Management

Async SQLAlchemy 2.0 engine and session factory. One ``Database`` is built at
process start and handed to request handlers; nothing here is a module-level
singleton.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

from bio_storefront.config import Settings
from bio_storefront.database.models import Base
from bio_storefront.errors import StorefrontError, UnexpectedError

logger = structlog.get_logger(__name__)


class Database:
    """
    Engine plus session factory for one process.

    Example:
        database = Database(settings.database.async_url)
        async with database.session() as db:
            result = await db.execute(query)
    """

    def __init__(self, url: str, echo: bool = False, engine: Optional[AsyncEngine] = None):
        self.url = url
        if engine is None:
            if url.startswith("sqlite"):
                # One shared connection so in-memory databases survive across sessions
                engine = create_async_engine(
                    url,
                    echo=echo,
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False},
                )
            else:
                # asyncpg keeps its own pool
                engine = create_async_engine(
                    url,
                    echo=echo,
                    pool_pre_ping=True,
                    poolclass=NullPool,
                )
        self.engine: AsyncEngine = engine
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database.async_url, echo=settings.database.echo)

    async def connect(self, create_tables: bool = False) -> None:
        """Verify connectivity, optionally creating the schema."""
        try:
            async with self.engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
                if create_tables:
                    await conn.run_sync(Base.metadata.create_all)
            logger.info("Database connection established", dialect=self.engine.dialect.name)
        except Exception as e:
            logger.error("Failed to connect to database", error=str(e))
            raise

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Unit of work for one request.

        Commits when the block exits cleanly, rolls back otherwise. Store
        failures surface as ``UnexpectedError``; other errors are re-raised.
        """
        session = self.session_factory()
        try:
            yield session
            await session.commit()
        except StorefrontError:
            await session.rollback()
            raise
        except SQLAlchemyError as e:
            logger.error("Database error, rolling back", error=str(e), error_type=type(e).__name__)
            await session.rollback()
            raise UnexpectedError("Database error") from e
        except Exception as e:
            logger.error("Database session error, rolling back", error=str(e), error_type=type(e).__name__)
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health(self) -> dict:
        try:
            start = time.perf_counter()
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            latency_ms = (time.perf_counter() - start) * 1000
            return {
                "status": "healthy",
                "latency_ms": round(latency_ms, 2),
            }
        except Exception as e:
            return {
                "status": "unhealthy",
                "error": str(e),
            }


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the process-wide Database from app state."""
    return request.app.state.database


async def get_db_dependency(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for database sessions.

    Example:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db_dependency)):
            ...
    """
    async with get_database(request).session() as session:
        yield session
