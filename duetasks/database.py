"""Async engine, session factory and table bootstrap for the task store."""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from duetasks.config import settings

logger = logging.getLogger(__name__)


def engine_options(url: str) -> dict:
    """SQLite (tests, local runs) shares one connection; Postgres gets a sized pool."""
    options = {"echo": settings.DATABASE_ECHO, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        options["poolclass"] = StaticPool
    else:
        options["pool_size"] = settings.DATABASE_POOL_SIZE
        options["max_overflow"] = settings.DATABASE_MAX_OVERFLOW
    return options


engine = create_async_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db() -> AsyncSession:
    """One session per request; uncommitted work is rolled back on error."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except SQLAlchemyError:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create the users and tasks tables if they are missing."""
    import duetasks.models  # noqa: F401  registers mappers on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


async def close_db() -> None:
    await engine.dispose()
