from core.search.cache import TTLCache

class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

def test_get_returns_fresh_entries():
    clock = FakeClock()
    cache = TTLCache(expiry_seconds=60, clock=clock)
    cache.set("dune", ["result"])
    clock.now += 60
    assert cache.get("dune") == ["result"]
    assert cache.stats()["hits"] == 1

def test_expired_entries_are_never_served():
    clock = FakeClock()
    cache = TTLCache(expiry_seconds=60, clock=clock)
    cache.set("dune", ["result"])
    clock.now += 61
    assert cache.get("dune") is None
    assert len(cache) == 0
    assert cache.misses == 1

def test_missing_key_counts_as_miss():
    cache = TTLCache()
    assert cache.get("nothing") is None
    assert cache.stats() == {"size": 0, "hits": 0, "misses": 1, "expiry_seconds": 300}

def test_clean_expired():
    clock = FakeClock()
    cache = TTLCache(expiry_seconds=10, clock=clock)
    cache.set("old", 1)
    clock.now += 8
    cache.set("new", 2)
    clock.now += 5
    assert cache.clean_expired() == 1
    assert len(cache) == 1
    assert cache.get("new") == 2
    assert cache.last_cleanup == clock.now

def test_clear():
    cache = TTLCache()
    cache.set("a", 1)
    cache.clear()
    assert len(cache) == 0
