from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base

from showcase.config import get_settings

settings = get_settings()


def _engine_options(database_url: str) -> dict:
    """Pool sizing applies to server databases only"""
    options = {"echo": settings.DEBUG, "pool_pre_ping": True}
    if not make_url(database_url).get_backend_name().startswith("sqlite"):
        options.update(pool_size=settings.DB_POOL_SIZE, max_overflow=settings.DB_MAX_OVERFLOW)
    return options


engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db() -> AsyncSession:
    """Request-scoped session; services commit or roll back themselves"""
    async with AsyncSessionLocal() as session:
        yield session
