import pytest

from propdata.services.lookup_cache import LookupCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_get_returns_stored_value_until_expiry():
    clock = FakeClock()
    cache = LookupCache(ttl_seconds=60, clock=clock)
    cache.set("k", "v")

    clock.now += 59
    assert cache.get("k") == "v"

    clock.now += 1
    assert cache.get("k") is None
    assert "k" not in cache


def test_least_recently_used_entry_is_evicted():
    cache = LookupCache(ttl_seconds=60, max_entries=2, clock=FakeClock())
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.get("a") == 1

    cache.set("c", 3)

    assert len(cache) == 2
    assert cache.get("b") is None
    assert cache.get("a") == 1
    assert cache.get("c") == 3


def test_hit_and_miss_counters():
    cache = LookupCache(clock=FakeClock())
    cache.get("missing")
    cache.set("k", 1)
    cache.get("k")

    assert cache.hits == 1
    assert cache.misses == 1


def test_invalidate_and_clear():
    cache = LookupCache(clock=FakeClock())
    cache.set("a", 1)
    cache.set("b", 2)

    cache.invalidate("a")
    assert cache.get("a") is None

    cache.clear()
    assert len(cache) == 0


@pytest.mark.parametrize("kwargs", [{"ttl_seconds": 0}, {"max_entries": 0}])
def test_invalid_limits_rejected(kwargs):
    with pytest.raises(ValueError):
        LookupCache(**kwargs)
