"""
Archive Tree — Async SQLAlchemy database setup.

Hosts normally own their engine and hand a session to ``DateArchive``.
``make_engine`` builds one from a URL; the module-level ``engine`` /
``async_session`` pair is the default wiring from ``settings``.  Schema
helpers take any engine so tests can point them at an in-memory database.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from archive_tree.config import settings

# Pooling only applies to real servers; SQLite uses its own pool classes.
SERVER_POOL = {
    "pool_size": 5,
    "max_overflow": 10,
    "pool_pre_ping": True,
    "pool_recycle": 300,
}


def make_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for ``url``."""
    pool = {} if url.startswith("sqlite") else SERVER_POOL
    return create_async_engine(url, echo=echo, **pool)


engine = make_engine(settings.database_url, echo=settings.db_echo)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Dependency-style generator — yields a session from the default factory."""
    async with async_session() as session:
        yield session


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create every archivable table on ``bind`` (default engine when omitted)."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(bind: AsyncEngine | None = None) -> None:
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def close_db(bind: AsyncEngine | None = None) -> None:
    await (bind or engine).dispose()
