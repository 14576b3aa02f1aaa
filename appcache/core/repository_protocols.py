"""Boundary Protocols — contracts between the cache core and its storage shell.

Invariants:
    - Core NEVER imports from infrastructure/ or db/; dependency arrows point inward only
    - Store rows cross the boundary as plain dicts keyed by column name
    - Absence is None / empty list, never an exception

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no inheritance
    - Async in Protocol: implementations do IO, the pure functions that consume
      their results (reconcile, is_cache_valid) are never async themselves
"""

from typing import Protocol

from appcache.core.domain_types import Partition


class RemoteAppLike(Protocol):
    """Structural contract for a remote app item fed to reconciliation."""
    @property
    def id(self) -> str: ...

    @property
    def updated_at(self) -> str | None: ...


class CachedAppLike(Protocol):
    """Anything reconciliation can compare against: full records or summaries."""
    @property
    def app_id(self) -> str: ...

    @property
    def updated_at(self) -> str | None: ...


class PartitionedStore(Protocol):
    """Contract for the two-partition key-value store, implemented by the shell."""
    async def open(self) -> object: ...
    async def close(self) -> None: ...
    async def put(self, partition: Partition, record: dict) -> None: ...
    async def get(self, partition: Partition, key: str) -> dict | None: ...
    async def get_all(self, partition: Partition) -> list[dict]: ...
    async def get_all_by_scope(
        self, partition: Partition, scope: str,
    ) -> list[dict]: ...
    async def get_summaries_by_scope(self, scope: str) -> list[dict]: ...
    async def count_by_scope(self, partition: Partition, scope: str) -> int: ...
    async def list_scopes(self, partition: Partition) -> list[str]: ...
    async def delete(self, partition: Partition, key: str) -> None: ...
    async def delete_by_scope(self, partition: Partition, scope: str) -> int: ...
    async def health_check(self) -> bool: ...
