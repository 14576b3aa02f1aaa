"""Cache validity — strict staleness threshold on sync metadata."""

from appcache.core.cache_records import ScopeSyncMetadata
from appcache.core.cache_validity import is_cache_valid, now_ms
from appcache.core.domain_types import DEFAULT_MAX_AGE_MS

NOW = 1_700_000_000_000
DAY_MS = 24 * 60 * 60 * 1000


def _synced(at: int) -> ScopeSyncMetadata:
    return ScopeSyncMetadata(scope="foo.com:u1", last_sync_at=at, app_ids=("A",))


def test_default_max_age_is_one_day():
    assert DEFAULT_MAX_AGE_MS == DAY_MS


def test_age_exactly_at_threshold_is_invalid():
    assert not is_cache_valid(_synced(NOW - DAY_MS), DAY_MS, now=NOW)


def test_age_just_under_threshold_is_valid():
    assert is_cache_valid(_synced(NOW - DAY_MS + 1), DAY_MS, now=NOW)


def test_missing_metadata_is_invalid():
    assert not is_cache_valid(None, DAY_MS, now=NOW)
    assert not is_cache_valid(None, 10**15, now=NOW)


def test_custom_max_age():
    assert is_cache_valid(_synced(NOW - 999), 1000, now=NOW)
    assert not is_cache_valid(_synced(NOW - 1000), 1000, now=NOW)


def test_defaults_to_wall_clock():
    assert is_cache_valid(_synced(now_ms()))
    assert not is_cache_valid(_synced(now_ms() - DAY_MS - 1))
