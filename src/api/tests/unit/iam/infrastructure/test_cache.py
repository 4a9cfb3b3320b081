"""Unit tests for the in-memory TTL cache."""

from iam.infrastructure.cache import InMemoryTTLCache
from iam.ports import ITTLCache


class _Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestInMemoryTTLCache:
    """Tests for InMemoryTTLCache."""

    def test_implements_protocol(self):
        assert isinstance(InMemoryTTLCache(), ITTLCache)

    def test_returns_value_before_expiry(self):
        clock = _Clock()
        cache = InMemoryTTLCache(default_ttl=600, clock=clock)
        cache.set("k", "v")

        clock.now += 599
        assert cache.get("k") == "v"

    def test_expires_after_ttl(self):
        clock = _Clock()
        cache = InMemoryTTLCache(default_ttl=600, clock=clock)
        cache.set("k", "v")

        clock.now += 600
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_per_entry_ttl(self):
        clock = _Clock()
        cache = InMemoryTTLCache(default_ttl=600, clock=clock)
        cache.set("short", 1, ttl=5)
        cache.set("long", 2)

        clock.now += 10
        assert cache.get("short") is None
        assert cache.get("long") == 2

    def test_delete_and_clear(self):
        cache = InMemoryTTLCache()
        cache.set("a", 1)
        cache.set("b", 2)

        cache.delete("a")
        cache.delete("missing")
        assert cache.get("a") is None

        cache.clear()
        assert len(cache) == 0

    def test_write_sweeps_expired_entries(self):
        clock = _Clock()
        cache = InMemoryTTLCache(default_ttl=600, clock=clock)
        cache.set("tenant-1:roles", ["admin"])
        cache.set("tenant-2:roles", ["admin"], ttl=1200)

        clock.now += 600
        cache.set("tenant-3:roles", ["member"])

        assert len(cache) == 2
        assert cache.get("tenant-2:roles") == ["admin"]
