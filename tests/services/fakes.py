"""Test doubles for the cache manager: a hand-advanced clock and a delete-failing store."""

import asyncio

from appcache.core.domain_types import Partition

T0 = 1_700_000_000_000


class FakeClock:
    """Callable clock returning epoch milliseconds, advanced by hand."""

    def __init__(self, start: int = T0):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FlakyDeleteStore:
    """Store whose deletes sleep per key and fail for configured keys.

    delays: record key suffix (app id) -> seconds to sleep before settling
    failures: app id -> exception to raise once settled
    """

    def __init__(self, delays: dict[str, float], failures: dict[str, Exception]):
        self.delays = delays
        self.failures = failures
        self.settled: list[str] = []

    async def delete(self, partition: Partition, key: str) -> None:
        app_id = key.rsplit(":", 1)[1]
        await asyncio.sleep(self.delays.get(app_id, 0))
        self.settled.append(app_id)
        if app_id in self.failures:
            raise self.failures[app_id]
