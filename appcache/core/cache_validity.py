"""Cache Validity — staleness check against sync metadata."""

import time

from appcache.core.cache_records import ScopeSyncMetadata
from appcache.core.domain_types import DEFAULT_MAX_AGE_MS, EpochMillis


def now_ms() -> EpochMillis:
    """Wall-clock instant in epoch milliseconds."""
    return EpochMillis(int(time.time() * 1000))


def is_cache_valid(
    metadata: ScopeSyncMetadata | None,
    max_age_ms: int = DEFAULT_MAX_AGE_MS,
    now: int | None = None,
) -> bool:
    """True while the last sync is strictly younger than max_age_ms."""
    if metadata is None:
        return False
    current = now_ms() if now is None else now
    return (current - metadata.last_sync_at) < max_age_ms
