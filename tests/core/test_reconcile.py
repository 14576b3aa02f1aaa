"""Reconciliation — pure three-way diff between cached apps and remote truth.

Tests cover:
    - New, changed, unchanged, and orphaned apps
    - Missing remote timestamp never counts as changed
    - App ids are compared exactly (case and whitespace significant)
    - Empty inputs on either side
    - unchanged returns the cached object, not the remote item
"""

from dataclasses import dataclass

from appcache.core.cache_records import CachedAppRecord, CachedAppSummary
from appcache.core.reconcile import is_changed, reconcile_apps
from appcache.schemas.remote_app import RemoteAppItem


def _cached(app_id: str, updated_at: str | None) -> CachedAppRecord:
    return CachedAppRecord(
        cache_key=f"foo.com:u1:{app_id}",
        scope="foo.com:u1",
        app_id=app_id,
        name=app_id.upper(),
        data={"sheets": [app_id]},
        updated_at=updated_at,
        cached_at=1,
    )


def _remote(app_id: str, updated_at: str | None = None) -> RemoteAppItem:
    return RemoteAppItem(id=app_id, name=app_id, updated_at=updated_at)


def test_changed_timestamp_loads_and_untimestamped_new_app_loads():
    a, b = _cached("A", "t1"), _cached("B", "t2")
    ra, rb, rc = _remote("A", "t1"), _remote("B", "t3"), _remote("C")

    result = reconcile_apps([a, b], [ra, rb, rc])

    assert result.to_load == [rb, rc]
    assert result.unchanged == [a]
    assert result.to_remove == []


def test_app_missing_from_remote_is_removed():
    a, b = _cached("A", "t1"), _cached("B", "t2")

    result = reconcile_apps([a, b], [_remote("A", "t1")])

    assert result.to_load == []
    assert result.unchanged == [a]
    assert result.to_remove == ["B"]


def test_empty_cache_loads_everything():
    x, y = _remote("X", "t1"), _remote("Y")

    result = reconcile_apps([], [x, y])

    assert result.to_load == [x, y]
    assert result.unchanged == []
    assert result.to_remove == []


def test_empty_remote_evicts_everything():
    result = reconcile_apps([_cached("A", "t1"), _cached("B", None)], [])
    assert result.to_load == []
    assert result.unchanged == []
    assert result.to_remove == ["A", "B"]


def test_both_empty_is_noop():
    result = reconcile_apps([], [])
    assert result.is_noop
    assert result.unchanged == []


def test_missing_remote_timestamp_keeps_cached_copy():
    a = _cached("A", "t1")
    result = reconcile_apps([a], [_remote("A", None)])
    assert result.unchanged == [a]
    assert result.to_load == []


def test_remote_timestamp_against_untimestamped_cache_loads():
    remote = _remote("A", "t1")
    result = reconcile_apps([_cached("A", None)], [remote])
    assert result.to_load == [remote]


def test_app_ids_differing_in_case_or_whitespace_are_different_apps():
    cached = _cached("App1", "t1")
    upper, padded = _remote("APP1", "t1"), _remote(" App1", "t1")

    result = reconcile_apps([cached], [upper, padded])

    assert result.to_load == [upper, padded]
    assert result.unchanged == []
    assert result.to_remove == ["App1"]


def test_unchanged_returns_cached_record_with_payload():
    cached = _cached("A", "t1")
    result = reconcile_apps([cached], [_remote("A", "t1")])
    assert result.unchanged[0] is cached
    assert result.unchanged[0].data == {"sheets": ["A"]}


def test_timestamps_compared_as_strings_not_instants():
    # Same instant, different spelling: still a change
    cached = _cached("A", "2024-01-01T00:00:00Z")
    remote = _remote("A", "2024-01-01T00:00:00.000Z")
    assert reconcile_apps([cached], [remote]).to_load == [remote]


def test_works_on_summaries():
    summary = CachedAppSummary(app_id="A", name="A", updated_at="t1")
    result = reconcile_apps([summary], [_remote("A", "t1"), _remote("B", "t1")])
    assert result.unchanged == [summary]
    assert [item.id for item in result.to_load] == ["B"]


def test_accepts_any_object_with_id_and_updated_at():
    @dataclass
    class Listed:
        id: str
        updated_at: str | None

    item = Listed("A", "t2")
    result = reconcile_apps([_cached("A", "t1")], [item])
    assert result.to_load == [item]


def test_inputs_are_not_mutated():
    cached = [_cached("A", "t1")]
    remote = [_remote("B")]
    reconcile_apps(cached, remote)
    assert [c.app_id for c in cached] == ["A"]
    assert [r.id for r in remote] == ["B"]


def test_is_changed_requires_remote_timestamp():
    assert not is_changed(_remote("A", None), _cached("A", "t1"))
    assert not is_changed(_remote("A", "t1"), _cached("A", "t1"))
    assert is_changed(_remote("A", "t2"), _cached("A", "t1"))
