"""Partitioned Key-Value Store — SQL-backed adapter with a lazily opened, shared handle.

Invariants:
    - open() is idempotent; concurrent first callers await ONE in-flight open task
    - The schema upgrade hook runs once per successful open, never per operation
    - Every operation runs in its own session; sessions auto-roll-back on exception
    - All SQLAlchemy exceptions mapped to StorageError (core/errors.py)
    - Absence is None / [] / 0, never an exception; delete of an absent key is a no-op
    - In-memory or unreachable databases raise UnavailableError

Design Decisions:
    - Handle cell is per instance, injected into the cache manager (ADR: no global db_manager)
    - asyncio.shield around the shared open task: a cancelled caller never
      cancels initialization for the others
    - A failed open clears the in-flight task so a later call can try again;
      nothing is retried automatically
    - put() is ONE native upsert statement (INSERT .. ON CONFLICT DO UPDATE on
      SQLite/PostgreSQL, ON DUPLICATE KEY UPDATE on MySQL/MariaDB): concurrent
      writers of a key never both INSERT; last write wins
    - Other dialects fall back to merge() (SELECT + INSERT/UPDATE)
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncGenerator

from sqlalchemy import delete, distinct, func, inspect, select, text
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import (
    ArgumentError, IntegrityError, InvalidRequestError, OperationalError,
    DBAPIError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy.sql.expression import Executable

from appcache.core.domain_types import Partition
from appcache.core.errors import ErrorContext, StorageError, UnavailableError
from appcache.db.base import Base
from appcache.db.session import (
    create_engine, create_session_factory, is_memory_sqlite,
)
from appcache.infrastructure.schema import upgrade_schema
from appcache.models.cache_metadata import CacheMetadata
from appcache.models.cached_app import CachedApp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _PartitionSpec:
    model: type[Base]
    key_column: InstrumentedAttribute
    scope_column: InstrumentedAttribute


# Metadata rows are keyed by the scope itself, so its primary key doubles as scope column.
_PARTITIONS: dict[Partition, _PartitionSpec] = {
    Partition.RECORDS: _PartitionSpec(
        CachedApp, CachedApp.cache_key, CachedApp.tenant_user,
    ),
    Partition.METADATA: _PartitionSpec(
        CacheMetadata, CacheMetadata.key, CacheMetadata.key,
    ),
}

_SUMMARY_COLUMNS = (
    CachedApp.app_id, CachedApp.name, CachedApp.updated_at, CachedApp.space_id,
)


def _require_persistent(database_url: str) -> URL:
    """Parse the URL and reject anything that would not outlive the process."""
    try:
        url = make_url(database_url)
    except ArgumentError as e:
        raise UnavailableError(f"invalid database URL ({e})") from e
    if is_memory_sqlite(url):
        raise UnavailableError("in-memory SQLite is not persistent storage")
    return url


def _to_dict(row: Base) -> dict:
    return {
        attr.key: getattr(row, attr.key)
        for attr in inspect(type(row)).column_attrs
    }


def _on_conflict_upsert(insert, spec: _PartitionSpec, record: dict) -> Executable:
    stmt = insert(spec.model).values(**record)
    key = spec.key_column.key
    return stmt.on_conflict_do_update(
        index_elements=[key],
        set_={name: stmt.excluded[name] for name in record if name != key},
    )


def _duplicate_key_upsert(spec: _PartitionSpec, record: dict) -> Executable:
    stmt = mysql.insert(spec.model).values(**record)
    key = spec.key_column.key
    return stmt.on_duplicate_key_update(
        {name: stmt.inserted[name] for name in record if name != key},
    )


def _upsert_statement(
    dialect_name: str, spec: _PartitionSpec, record: dict,
) -> Executable | None:
    """Single-statement upsert for dialects that have one, else None."""
    if dialect_name == "sqlite":
        return _on_conflict_upsert(sqlite.insert, spec, record)
    if dialect_name == "postgresql":
        return _on_conflict_upsert(postgresql.insert, spec, record)
    if dialect_name in ("mysql", "mariadb"):
        return _duplicate_key_upsert(spec, record)
    return None


class SqlPartitionedStore:
    """Two-partition key-value store over an async SQLAlchemy engine."""

    def __init__(
        self, database_url: str, pool_size: int = 1, max_overflow: int = 0,
    ):
        self.database_url = database_url
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._opening: asyncio.Future[AsyncEngine] | None = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    # ─── Lifecycle ───────────────────────────────────────────────

    async def open(self) -> AsyncEngine:
        """Return the shared engine, opening it on first use."""
        if self._engine is not None:
            return self._engine
        if self._opening is None:
            self._opening = asyncio.ensure_future(self._open())
        return await asyncio.shield(self._opening)

    async def _open(self) -> AsyncEngine:
        try:
            url = _require_persistent(self.database_url)
            try:
                engine = create_engine(
                    url,
                    pool_size=self.pool_size,
                    max_overflow=self.max_overflow,
                )
            except (ImportError, ArgumentError, InvalidRequestError) as e:
                raise UnavailableError(
                    f"no async driver for '{url.drivername}' ({e})",
                ) from e
            try:
                async with engine.begin() as conn:
                    await conn.run_sync(upgrade_schema)
            except OperationalError as e:
                await engine.dispose()
                raise UnavailableError(
                    f"cannot open '{url.render_as_string()}' ({e.orig})",
                ) from e
            except SQLAlchemyError as e:
                await engine.dispose()
                logger.error(
                    f"Cache schema upgrade failed: {e}",
                    extra={"operation": "open", "error_code": "STORAGE_ERROR"},
                )
                raise StorageError("Schema upgrade failed", "open") from e
        except UnavailableError as e:
            self._opening = None
            logger.error(
                e.message, extra={"operation": "open", "error_code": e.code},
            )
            raise
        except BaseException:
            self._opening = None
            raise

        self._engine = engine
        self._session_factory = create_session_factory(engine)
        logger.info(f"Cache store opened at {url.render_as_string()}")
        return engine

    async def close(self) -> None:
        """Dispose the engine and reset the handle cell (next call re-opens)."""
        engine = self._engine
        self._engine = None
        self._session_factory = None
        self._opening = None
        if engine is not None:
            await engine.dispose()
            logger.info("Cache store closed")

    @asynccontextmanager
    async def _session(
        self, operation: str, partition: Partition | None = None,
    ) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback and error mapping."""
        await self.open()
        session = self._session_factory()
        extra = {
            "operation": operation,
            "partition": partition.value if partition else None,
            "error_code": "STORAGE_ERROR",
        }
        context = ErrorContext(
            partition=partition.value if partition else None,
            operation=operation,
        )
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            logger.error(f"Cache integrity error: {e}", extra=extra)
            raise StorageError("Integrity constraint violated", operation, context) from e
        except OperationalError as e:
            await session.rollback()
            logger.error(f"Cache operational error: {e}", extra=extra)
            raise StorageError("Connection or operational error", operation, context) from e
        except DBAPIError as e:
            await session.rollback()
            logger.error(f"Cache driver error: {e}", extra=extra)
            raise StorageError("Database driver error", operation, context) from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}", extra=extra)
            raise StorageError("Database operation failed", operation, context) from e
        finally:
            await session.close()

    # ─── Point operations ────────────────────────────────────────

    async def put(self, partition: Partition, record: dict) -> None:
        """Upsert by primary key; replaces every column of an existing row."""
        spec = _PARTITIONS[partition]
        async with self._session("put", partition) as db:
            stmt = _upsert_statement(self._engine.dialect.name, spec, record)
            if stmt is None:
                await db.merge(spec.model(**record))
            else:
                await db.execute(stmt)
            await db.commit()

    async def get(self, partition: Partition, key: str) -> dict | None:
        spec = _PARTITIONS[partition]
        async with self._session("get", partition) as db:
            row = await db.get(spec.model, key)
            return _to_dict(row) if row is not None else None

    async def delete(self, partition: Partition, key: str) -> None:
        """Delete by primary key. Absent key is a no-op."""
        spec = _PARTITIONS[partition]
        async with self._session("delete", partition) as db:
            await db.execute(delete(spec.model).where(spec.key_column == key))
            await db.commit()

    # ─── Scope (secondary index) operations ──────────────────────

    async def get_all(self, partition: Partition) -> list[dict]:
        spec = _PARTITIONS[partition]
        async with self._session("get_all", partition) as db:
            result = await db.execute(select(spec.model))
            return [_to_dict(row) for row in result.scalars().all()]

    async def get_all_by_scope(
        self, partition: Partition, scope: str,
    ) -> list[dict]:
        """All rows whose scope equals the given value, unordered."""
        spec = _PARTITIONS[partition]
        async with self._session("get_all_by_scope", partition) as db:
            result = await db.execute(
                select(spec.model).where(spec.scope_column == scope),
            )
            return [_to_dict(row) for row in result.scalars().all()]

    async def get_summaries_by_scope(self, scope: str) -> list[dict]:
        """Records of a scope without the payload column."""
        async with self._session("get_summaries_by_scope", Partition.RECORDS) as db:
            result = await db.execute(
                select(*_SUMMARY_COLUMNS).where(CachedApp.tenant_user == scope),
            )
            return [dict(row._mapping) for row in result.all()]

    async def count_by_scope(self, partition: Partition, scope: str) -> int:
        spec = _PARTITIONS[partition]
        async with self._session("count_by_scope", partition) as db:
            result = await db.execute(
                select(func.count())
                .select_from(spec.model)
                .where(spec.scope_column == scope),
            )
            return result.scalar_one()

    async def list_scopes(self, partition: Partition) -> list[str]:
        spec = _PARTITIONS[partition]
        async with self._session("list_scopes", partition) as db:
            result = await db.execute(select(distinct(spec.scope_column)))
            return list(result.scalars().all())

    async def delete_by_scope(self, partition: Partition, scope: str) -> int:
        """Delete every row of a scope in one transaction. Returns row count."""
        spec = _PARTITIONS[partition]
        async with self._session("delete_by_scope", partition) as db:
            result = await db.execute(
                delete(spec.model).where(spec.scope_column == scope),
            )
            await db.commit()
            return result.rowcount or 0

    # ─── Probes ──────────────────────────────────────────────────

    async def health_check(self) -> bool:
        """Check storage connectivity (for readiness probes)."""
        try:
            async with self._session("health_check") as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Cache store health check failed: {e}")
            return False
