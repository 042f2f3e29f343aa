"""Site Cache Store — expiring shared entries and the request-local slot."""

import asyncio

from epetitions.infrastructure.site_cache import ExpiringCache, local_site


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_entry_available_until_ttl_expires():
    clock = FakeClock()
    cache = ExpiringCache(clock)
    cache.set("site", "value", ttl_seconds=300)

    clock.now += 299
    assert cache.get("site") == "value"

    clock.now += 1
    assert cache.get("site") is None


def test_delete_and_clear():
    cache = ExpiringCache(FakeClock())
    cache.set("a", 1, 60)
    cache.set("b", 2, 60)
    cache.delete("a")
    cache.delete("missing")
    assert cache.get("a") is None
    assert cache.get("b") == 2
    cache.clear()
    assert cache.get("b") is None


async def test_local_slot_is_isolated_per_task():
    local_site.set(None)

    async def request(value):
        local_site.set(value)
        await asyncio.sleep(0)
        return local_site.get()

    results = await asyncio.gather(request("first"), request("second"))

    assert results == ["first", "second"]
    assert local_site.get() is None
