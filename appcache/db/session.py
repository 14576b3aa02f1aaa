"""Async Engine & Session Factory — builds the engine and sessions the store runs on.

Invariants:
    - expire_on_commit=False: rows are converted to dicts after commit
    - File and server databases always get a queue pool of the configured size

Design Decisions:
    - Separate from infrastructure/kv_store.py: test fixtures and scripts need
      the raw factory without the store's lifecycle
    - poolclass pinned to AsyncAdaptedQueuePool: dialect defaults differ across
      SQLAlchemy releases (aiosqlite used NullPool for files)
"""

from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool


def is_memory_sqlite(url: URL) -> bool:
    if url.get_backend_name() != "sqlite":
        return False
    database = url.database or ""
    return (
        database in ("", ":memory:")
        or database.startswith("file::memory:")
        or url.query.get("mode") == "memory"
    )


def create_engine(
    database_url: str | URL, pool_size: int = 1, max_overflow: int = 0,
) -> AsyncEngine:
    """Create an async engine with a bounded connection pool."""
    url = make_url(database_url)
    kwargs: dict = {"pool_pre_ping": True}
    if not is_memory_sqlite(url):
        kwargs.update(
            poolclass=AsyncAdaptedQueuePool,
            pool_size=pool_size,
            max_overflow=max_overflow,
        )
    return create_async_engine(url, echo=False, **kwargs)


def create_session_factory(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the given engine."""
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
