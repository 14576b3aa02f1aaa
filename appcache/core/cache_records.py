"""Cache Records — domain shapes for cached apps and per-scope sync metadata.

Invariants:
    - All records are frozen: a write produces a new record, never a mutation
    - data is opaque: stored and returned as-is, never inspected or validated
    - cached_at / last_sync_at are epoch milliseconds
    - to_row / from_row round-trip every field (row keys == ORM column names)

Design Decisions:
    - Dataclasses in core, dict rows at the store boundary (ADR: core never imports ORM)
    - app_ids kept as tuple: hashable, immutable, list on the wire
"""

from dataclasses import dataclass
from typing import Any

from appcache.core.domain_types import ScopeKey, RecordKey, EpochMillis


@dataclass(frozen=True)
class CachedAppRecord:
    """One remote app as last observed, scoped to a tenant+user."""
    cache_key: RecordKey
    scope: ScopeKey
    app_id: str
    name: str
    data: Any
    updated_at: str | None
    cached_at: EpochMillis
    space_id: str | None = None

    def to_row(self) -> dict:
        return {
            "cache_key": self.cache_key,
            "tenant_user": self.scope,
            "app_id": self.app_id,
            "name": self.name,
            "data": self.data,
            "updated_at": self.updated_at,
            "cached_at": self.cached_at,
            "space_id": self.space_id,
        }

    @classmethod
    def from_row(cls, row: dict) -> "CachedAppRecord":
        return cls(
            cache_key=RecordKey(row["cache_key"]),
            scope=ScopeKey(row["tenant_user"]),
            app_id=row["app_id"],
            name=row["name"],
            data=row.get("data"),
            updated_at=row.get("updated_at"),
            cached_at=EpochMillis(row["cached_at"]),
            space_id=row.get("space_id"),
        )

    def summary(self) -> "CachedAppSummary":
        return CachedAppSummary(
            app_id=self.app_id,
            name=self.name,
            updated_at=self.updated_at,
            space_id=self.space_id,
        )


@dataclass(frozen=True)
class CachedAppSummary:
    """Payload-free projection of a cached app."""
    app_id: str
    name: str
    updated_at: str | None
    space_id: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> "CachedAppSummary":
        return cls(
            app_id=row["app_id"],
            name=row["name"],
            updated_at=row.get("updated_at"),
            space_id=row.get("space_id"),
        )


@dataclass(frozen=True)
class ScopeSyncMetadata:
    """Outcome of the last successful sync for one scope."""
    scope: ScopeKey
    last_sync_at: EpochMillis
    app_ids: tuple[str, ...] = ()

    def to_row(self) -> dict:
        return {
            "key": self.scope,
            "last_sync_at": self.last_sync_at,
            "app_ids": list(self.app_ids),
        }

    @classmethod
    def from_row(cls, row: dict) -> "ScopeSyncMetadata":
        return cls(
            scope=ScopeKey(row["key"]),
            last_sync_at=EpochMillis(row["last_sync_at"]),
            app_ids=tuple(row.get("app_ids") or ()),
        )


@dataclass(frozen=True)
class ScopeSummary:
    """One cached tenant+user as discovered across both partitions."""
    scope: ScopeKey
    tenant: str
    user_id: str
    app_count: int
    last_sync_at: EpochMillis | None = None
