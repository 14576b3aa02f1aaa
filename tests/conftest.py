"""Root conftest — shared storage fixtures.

Invariants:
    - Every test gets a fresh on-disk SQLite file under tmp_path
    - Stores are closed after each test (engine disposed)

Design Decisions:
    - On-disk, not :memory:: the store rejects in-memory databases as non-persistent
"""

import os

import pytest

from appcache.infrastructure.kv_store import SqlPartitionedStore

# Keep tests away from a developer's real cache file
os.environ.setdefault("APP_CACHE_DATABASE_URL", "sqlite+aiosqlite:///./test-app-cache.db")


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'app-cache.db'}"


@pytest.fixture
async def store(database_url):
    store = SqlPartitionedStore(database_url)
    yield store
    await store.close()
