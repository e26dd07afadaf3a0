from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import get_settings
from app.db.base import Base

settings = get_settings()


def _engine_options(database_url: str) -> dict[str, Any]:
    """Pool options for server databases; SQLite picks its own pool."""
    if database_url.startswith("sqlite"):
        return {}
    return {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 3600,  # recycle hourly
    }


engine: AsyncEngine = create_async_engine(
    str(settings.database_url),
    future=True,
    echo=settings.app_env == "local",
    **_engine_options(str(settings.database_url)),
)

SessionLocal = async_sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    class_=AsyncSession,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for request scope injections."""
    async with SessionLocal() as session:
        yield session


async def init_models() -> None:
    """Create all tables. Used for local runs; deployments go through Alembic."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
