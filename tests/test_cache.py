"""Tests for the TTL cache used by every provider."""

from sportscast.utils.cache import TTLCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestTTLCache:
    """get/put/invalidate semantics with expiry checked on read."""

    def test_get_missing_returns_none(self):
        cache = TTLCache(60)
        assert cache.get("nope") is None
        assert cache.stats()["misses"] == 1

    def test_put_then_get(self):
        cache = TTLCache(60, name="schedule")
        cache.put("nba-bos", {"games": 3})
        assert cache.get("nba-bos") == {"games": 3}
        assert cache.stats() == {"name": "schedule", "entries": 1, "hits": 1, "misses": 0}

    def test_entry_expires_after_ttl(self):
        clock = FakeClock()
        cache = TTLCache(60, clock=clock)
        cache.put("k", "v")
        clock.now += 59
        assert cache.get("k") == "v"
        clock.now += 1
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_per_entry_ttl_overrides_default(self):
        clock = FakeClock()
        cache = TTLCache(60, clock=clock)
        cache.put("short", 1, ttl=5)
        cache.put("long", 2)
        clock.now += 10
        assert cache.get("short") is None
        assert cache.get("long") == 2

    def test_put_overwrites_wholesale(self):
        cache = TTLCache(60)
        cache.put("k", {"a": 1})
        cache.put("k", {"b": 2})
        assert cache.get("k") == {"b": 2}

    def test_invalidate_one_key(self):
        cache = TTLCache(60)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.invalidate("a")
        assert cache.get("a") is None
        assert cache.get("b") == 2

    def test_invalidate_all(self):
        cache = TTLCache(60)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.invalidate()
        assert len(cache) == 0

    def test_falsy_values_are_cached(self):
        cache = TTLCache(60)
        cache.put("empty", [])
        assert cache.get("empty") == []
