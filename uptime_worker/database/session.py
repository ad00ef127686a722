"""Database engine and session factory with async support."""

from typing import Tuple

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool, StaticPool

from uptime_worker.config import DatabaseConfig
from uptime_worker.database.base import Base
from uptime_worker.utils.logger import get_logger

logger = get_logger(__name__)


def create_engine_from_config(config: DatabaseConfig) -> AsyncEngine:
    """
    Create the async engine for the record store.
    
    Args:
        config: Database configuration
        
    Returns:
        AsyncEngine: Configured engine
    """
    url = config.url
    
    if "sqlite" in url:
        if ":memory:" in url:
            # Every connection to an in-memory database is a new database,
            # so all sessions must share one connection
            pool_kwargs = {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        else:
            pool_kwargs = {"poolclass": NullPool}
    else:
        pool_kwargs = {
            "poolclass": AsyncAdaptedQueuePool,
            "pool_size": config.pool_size,
            "max_overflow": config.max_overflow,
            "pool_pre_ping": True,
            "pool_recycle": 3600,
        }
    
    return create_async_engine(url, echo=config.echo, **pool_kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create the async session factory bound to ``engine``."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def setup_database(config: DatabaseConfig) -> Tuple[AsyncEngine, async_sessionmaker]:
    """Create engine and session factory in one step."""
    engine = create_engine_from_config(config)
    return engine, create_session_factory(engine)


async def init_models(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    # Import models so they register with Base.metadata
    from uptime_worker.models.record import StoredRecord  # noqa: F401
    
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
    
    logger.info("Database tables ensured")
