"""Service test fixtures — cache manager over a real on-disk store with a controllable clock."""

import pytest

from appcache.services.app_cache import AppCacheManager
from tests.services.fakes import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def cache(store, clock):
    return AppCacheManager(store, clock=clock)
