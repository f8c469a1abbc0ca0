"""
Database Engine and Sessions
Async engine for the board store, request-scoped sessions and table setup
"""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy import text
import structlog

from taskboard.core.config import settings, DATABASE_CONFIG

logger = structlog.get_logger()

Base = declarative_base()


def async_database_url(url: str) -> str:
    """Plain postgres URLs are served through asyncpg"""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def build_engine(url: str) -> AsyncEngine:
    """
    Create the async engine for a database URL

    Pool settings and the connection label only apply to PostgreSQL; other
    drivers (sqlite+aiosqlite in tests) get their defaults.
    """
    url = async_database_url(url)
    if not url.startswith("postgresql"):
        return create_async_engine(url)

    return create_async_engine(
        url,
        **DATABASE_CONFIG,
        connect_args={"server_settings": {"application_name": "taskboard-api"}},
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    # Reminder snapshots are read after commit, so rows must not expire on commit
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False, autoflush=False)


engine = build_engine(settings.DATABASE_URL)
AsyncSessionLocal = build_session_factory(engine)


async def get_db() -> AsyncSession:
    """
    Database session dependency for FastAPI endpoints

    Commits when the handler returns, rolls back when it raises.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def create_tables(bind: AsyncEngine) -> None:
    """Create every board, card, notification and reminder table that is missing"""
    import taskboard.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_database_health() -> bool:
    """Used by health check endpoints"""
    try:
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            return result.scalar() == 1
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        return False


async def init_database():
    """Called during application startup"""
    try:
        await create_tables(engine)
        logger.info("Database initialized", tables=sorted(Base.metadata.tables))
    except Exception as e:
        logger.error("Database initialization failed", error=str(e))
        raise


async def close_database():
    """Called during application shutdown"""
    try:
        await engine.dispose()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error("Error closing database connections", error=str(e))
