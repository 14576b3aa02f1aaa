"""Reconciliation — classify remote app items against the cached state of one scope.

Invariants:
    - Pure: no IO, no clock, inputs are never mutated
    - Output is a disjoint partition: every remote item lands in exactly one of
      to_load / unchanged, every cached id absent from remote lands in to_remove
    - App ids compared exactly (no case folding, no trimming)
    - A remote item without updated_at never counts as changed
    - unchanged holds the CACHED object, not the remote item

Design Decisions:
    - Generic over CachedAppLike: the same pass serves full records and
      payload-free summaries (lightweight reconcile)
    - Empty remote list is not special-cased: every cached id is reported in
      to_remove and the caller decides whether that is an eviction or a failed fetch
"""

from dataclasses import dataclass, field
from typing import Generic, Iterable, Sequence, TypeVar

from appcache.core.repository_protocols import CachedAppLike, RemoteAppLike

C = TypeVar("C", bound=CachedAppLike)
R = TypeVar("R", bound=RemoteAppLike)


@dataclass
class Reconciliation(Generic[R, C]):
    """Work plan produced by reconcile_apps."""
    to_load: list[R] = field(default_factory=list)
    to_remove: list[str] = field(default_factory=list)
    unchanged: list[C] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return not self.to_load and not self.to_remove


def is_changed(remote: RemoteAppLike, cached: CachedAppLike) -> bool:
    """Remote timestamp present and different from the cached one."""
    return remote.updated_at is not None and remote.updated_at != cached.updated_at


def reconcile_apps(
    cached: Iterable[C],
    remote: Sequence[R],
) -> Reconciliation[R, C]:
    """Three-way diff of cached records vs remote truth. Pure, no IO."""
    cached = list(cached)
    cached_by_id = {c.app_id: c for c in cached}
    remote_ids = {item.id for item in remote}

    result: Reconciliation[R, C] = Reconciliation()
    for item in remote:
        hit = cached_by_id.get(item.id)
        if hit is None or is_changed(item, hit):
            result.to_load.append(item)
        else:
            result.unchanged.append(hit)

    result.to_remove = [c.app_id for c in cached if c.app_id not in remote_ids]
    return result
