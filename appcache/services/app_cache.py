"""App Cache Manager — the public surface: domain operations over the partitioned store.

Invariants:
    - Callers never see partitions or rows, only CachedAppRecord / ScopeSyncMetadata
    - Exactly one record per (scope, app id): set_app_data overwrites in place
    - remove_apps([]) returns without touching the store
    - Bulk deletes settle completely before the FIRST failure is raised; later
      failures are logged only, issued deletes are never rolled back
    - clear_cache is NOT atomic: records first, metadata last, so a crash leaves
      "records without metadata", which callers treat as "needs full resync"
    - No retries, no fallbacks: every failure surfaces as StorageError/UnavailableError

Design Decisions:
    - Store injected via constructor (ADR: explicit handle cell, no ambient singleton)
    - Clock injected: cached_at / last_sync_at are testable without sleeping
    - Reconciliation delegated to core/reconcile.py: the manager only loads the
      cached side and hands both sides to the pure function (ADR: impureim sandwich)
"""

import asyncio
import logging
from typing import Any, Callable, Sequence

from appcache.config import Settings, get_settings
from appcache.core.cache_records import (
    CachedAppRecord, CachedAppSummary, ScopeSummary, ScopeSyncMetadata,
)
from appcache.core.cache_validity import is_cache_valid, now_ms
from appcache.core.domain_types import (
    DEFAULT_MAX_AGE_MS, EpochMillis, Partition, ScopeKey,
)
from appcache.core.reconcile import Reconciliation, reconcile_apps
from appcache.core.repository_protocols import PartitionedStore, RemoteAppLike
from appcache.core.scope_key import record_key, scope_key, split_scope_key
from appcache.infrastructure.kv_store import SqlPartitionedStore
from appcache.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


class AppCacheManager:
    """Cache of remote apps keyed by tenant URL + user id."""

    def __init__(
        self,
        store: PartitionedStore,
        max_age_ms: int = DEFAULT_MAX_AGE_MS,
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store
        self.max_age_ms = max_age_ms
        self._clock = clock

    scope_key = staticmethod(scope_key)

    async def close(self) -> None:
        await self.store.close()

    # ─── App records ─────────────────────────────────────────────

    async def set_app_data(
        self,
        tenant_url: str,
        user_id: str,
        app_id: str,
        name: str,
        data: Any,
        updated_at: str | None,
        space_id: str | None = None,
    ) -> CachedAppRecord:
        """Store (or overwrite) one app, stamped with the current instant."""
        scope = scope_key(tenant_url, user_id)
        record = CachedAppRecord(
            cache_key=record_key(scope, app_id),
            scope=scope,
            app_id=app_id,
            name=name,
            data=data,
            updated_at=updated_at,
            cached_at=EpochMillis(self._clock()),
            space_id=space_id,
        )
        await self.store.put(Partition.RECORDS, record.to_row())
        return record

    async def get_app_data(
        self, tenant_url: str, user_id: str, app_id: str,
    ) -> CachedAppRecord | None:
        scope = scope_key(tenant_url, user_id)
        row = await self.store.get(Partition.RECORDS, record_key(scope, app_id))
        return CachedAppRecord.from_row(row) if row is not None else None

    async def get_all_cached_apps(
        self, tenant_url: str, user_id: str,
    ) -> list[CachedAppRecord]:
        """Every cached app of the scope, unordered."""
        scope = scope_key(tenant_url, user_id)
        rows = await self.store.get_all_by_scope(Partition.RECORDS, scope)
        return [CachedAppRecord.from_row(row) for row in rows]

    async def get_cached_app_summaries(
        self, tenant_url: str, user_id: str,
    ) -> list[CachedAppSummary]:
        """Like get_all_cached_apps, without loading payloads."""
        scope = scope_key(tenant_url, user_id)
        rows = await self.store.get_summaries_by_scope(scope)
        return [CachedAppSummary.from_row(row) for row in rows]

    async def remove_app(
        self, tenant_url: str, user_id: str, app_id: str,
    ) -> None:
        scope = scope_key(tenant_url, user_id)
        await self.store.delete(Partition.RECORDS, record_key(scope, app_id))

    async def remove_apps(
        self, tenant_url: str, user_id: str, app_ids: Sequence[str],
    ) -> None:
        """Delete many apps concurrently; raise the first failure once all settle."""
        if not app_ids:
            return
        scope = scope_key(tenant_url, user_id)
        failures: list[Exception] = []

        async def _delete(app_id: str) -> None:
            try:
                await self.store.delete(
                    Partition.RECORDS, record_key(scope, app_id),
                )
            except Exception as e:
                failures.append(e)

        await asyncio.gather(*(_delete(app_id) for app_id in app_ids))

        if failures:
            logger.error(
                f"Failed to remove {len(failures)} of {len(app_ids)} app(s)",
                extra={"scope": scope, "count": len(failures)},
            )
            raise failures[0]

    async def clear_cache(self, tenant_url: str, user_id: str) -> None:
        """Remove every app of the scope, then its metadata."""
        cached = await self.get_cached_app_summaries(tenant_url, user_id)
        await self.remove_apps(tenant_url, user_id, [app.app_id for app in cached])
        await self.clear_metadata(tenant_url, user_id)
        logger.info(
            "Cleared cache",
            extra={"scope": scope_key(tenant_url, user_id), "count": len(cached)},
        )

    # ─── Sync metadata ───────────────────────────────────────────

    async def set_metadata(
        self, tenant_url: str, user_id: str, app_ids: Sequence[str],
    ) -> ScopeSyncMetadata:
        """Record a completed sync; replaces any previous metadata."""
        metadata = ScopeSyncMetadata(
            scope=scope_key(tenant_url, user_id),
            last_sync_at=EpochMillis(self._clock()),
            app_ids=tuple(app_ids),
        )
        await self.store.put(Partition.METADATA, metadata.to_row())
        return metadata

    async def get_metadata(
        self, tenant_url: str, user_id: str,
    ) -> ScopeSyncMetadata | None:
        row = await self.store.get(
            Partition.METADATA, scope_key(tenant_url, user_id),
        )
        return ScopeSyncMetadata.from_row(row) if row is not None else None

    async def clear_metadata(self, tenant_url: str, user_id: str) -> None:
        await self.store.delete(
            Partition.METADATA, scope_key(tenant_url, user_id),
        )

    async def has_valid_cache(self, tenant_url: str, user_id: str) -> bool:
        """True if the scope synced less than max_age_ms ago."""
        metadata = await self.get_metadata(tenant_url, user_id)
        return is_cache_valid(metadata, self.max_age_ms, self._clock())

    # ─── Reconciliation ──────────────────────────────────────────

    async def reconcile(
        self,
        tenant_url: str,
        user_id: str,
        remote_items: Sequence[RemoteAppLike],
    ) -> Reconciliation:
        """Classify remote items into to_load / unchanged / to_remove."""
        cached = await self.get_all_cached_apps(tenant_url, user_id)
        result = reconcile_apps(cached, remote_items)
        logger.debug(
            f"Reconciled {len(remote_items)} remote app(s): "
            f"{len(result.to_load)} to load, {len(result.unchanged)} unchanged, "
            f"{len(result.to_remove)} to remove",
            extra={"scope": scope_key(tenant_url, user_id)},
        )
        return result

    async def reconcile_lightweight(
        self,
        tenant_url: str,
        user_id: str,
        remote_items: Sequence[RemoteAppLike],
    ) -> Reconciliation:
        """Same classification; unchanged holds CachedAppSummary (no payloads)."""
        summaries = await self.get_cached_app_summaries(tenant_url, user_id)
        return reconcile_apps(summaries, remote_items)

    # ─── Scope administration ────────────────────────────────────

    async def list_cached_scopes(self) -> list[ScopeSummary]:
        """Every scope present in either partition, with app counts."""
        record_scopes = await self.store.list_scopes(Partition.RECORDS)
        metadata = {
            row["key"]: ScopeSyncMetadata.from_row(row)
            for row in await self.store.get_all(Partition.METADATA)
        }
        scopes = sorted(set(record_scopes) | set(metadata))

        summaries = []
        for scope in scopes:
            tenant, user_id = split_scope_key(scope)
            meta = metadata.get(scope)
            summaries.append(ScopeSummary(
                scope=ScopeKey(scope),
                tenant=tenant,
                user_id=user_id,
                app_count=await self.store.count_by_scope(Partition.RECORDS, scope),
                last_sync_at=meta.last_sync_at if meta else None,
            ))
        return summaries

    async def delete_scope(self, scope: str) -> int:
        """Purge one scope (records in one transaction, then metadata)."""
        deleted = await self.store.delete_by_scope(Partition.RECORDS, scope)
        await self.store.delete(Partition.METADATA, scope)
        logger.info(
            f"Deleted {deleted} cached app(s)",
            extra={"scope": scope, "count": deleted},
        )
        return deleted


def build_app_cache(
    settings: Settings | None = None, configure_logging: bool = False,
) -> AppCacheManager:
    """Wire a manager over a SQL store from settings. Nothing is opened yet.

    With configure_logging=True the cache's log handler is installed from
    settings.log_level / settings.log_format.
    """
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings.log_level, settings.log_format)
    store = SqlPartitionedStore(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    return AppCacheManager(store, max_age_ms=settings.cache_max_age_ms)
