import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> AsyncEngine:
    """
    Create the async engine for a database URL.

    Pool sizing only applies to server databases; SQLite (used by the test
    suite) runs on SQLAlchemy's default pool.
    """
    kwargs = {
        "echo": settings.SQLALCHEMY_ECHO,
        "pool_pre_ping": True,
    }
    if not database_url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_recycle=3600,
            pool_timeout=30,
            # Fail fast instead of hanging when the database is unreachable
            connect_args={"timeout": settings.DB_CONNECT_TIMEOUT},
        )
    return create_async_engine(database_url, **kwargs)


engine = build_engine(settings.DATABASE_URL)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def init_db(bind: AsyncEngine = engine) -> None:
    """Create any missing tables."""
    from app.db.base import Base

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_db_connection(bind: AsyncEngine = engine) -> bool:
    """Round-trip a trivial query; False on any failure (reported by /health)."""
    try:
        async with bind.connect() as conn:
            await conn.scalar(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"Database check failed: {e}")
        return False
    return True
