"""SQLite client and connection management with SQLAlchemy."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.config.settings import settings
from src.database.base import Base

logger = logging.getLogger(__name__)

# Global SQLAlchemy engine
_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get the SQLAlchemy async engine instance."""
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the SQLAlchemy async session factory."""
    if _async_session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _async_session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession]:
    """Get an async database session.

    Usage:
        async with get_session() as session:
            result = await session.execute(select(User))
            users = result.scalars().all()
    """
    session_factory = get_session_factory()
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def _create_engine(database_url: str) -> AsyncEngine:
    url = make_url(database_url)
    is_memory = url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")

    if is_memory:
        # One shared connection, otherwise every session sees an empty database
        return create_async_engine(
            database_url,
            echo=settings.database_echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

    return create_async_engine(database_url, echo=settings.database_echo, pool_pre_ping=True)


def _register_models() -> None:
    """Import every model module so its table is attached to Base.metadata."""
    from src.features.auth import models as auth_models  # noqa: F401
    from src.features.file import models as file_models  # noqa: F401
    from src.features.post import models as post_models  # noqa: F401
    from src.features.user import models as user_models  # noqa: F401
    from src.shared.rate_limit import models as rate_limit_models  # noqa: F401


async def init_db(database_url: str | None = None) -> None:
    """Initialize the database connection and schema.

    This function:
    1. Creates the async engine
    2. Creates the session factory
    3. Creates missing tables
    4. Seeds demo data into an empty database
    """
    global _engine, _async_session_factory

    database_url = database_url or settings.database_url

    try:
        logger.info(f"Connecting to database at {make_url(database_url).render_as_string(hide_password=True)}")

        _engine = _create_engine(database_url)

        _async_session_factory = async_sessionmaker(
            _engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        _register_models()
        async with _engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            await conn.run_sync(Base.metadata.create_all)

        logger.info("Database connection successful")

        if settings.seed_demo_data:
            from src.database.seed import seed_demo_data

            async with get_session() as session:
                await seed_demo_data(session)

        logger.info("Database initialization complete")

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


async def close_db() -> None:
    """Close the database connection gracefully."""
    global _engine, _async_session_factory

    if _engine is not None:
        logger.info("Closing database connection")
        await _engine.dispose()
        _engine = None
        _async_session_factory = None
        logger.info("Database connection closed")
