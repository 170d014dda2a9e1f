# tests/test_cache_service.py
import pytest

from admin_core.services.cache_service import MISSING, CacheService, MemoryCache


@pytest.fixture
def cache():
    return CacheService({"default_ttl": 60, "max_size": 3}, namespace="test")


# --- MemoryCache ---


def test_memory_cache_miss_returns_sentinel():
    backend = MemoryCache(max_size=2)
    assert backend.get("absent") is MISSING
    assert backend.stats["misses"] == 1


def test_memory_cache_expired_entry_is_a_miss(monkeypatch):
    clock = {"now": 1000.0}
    monkeypatch.setattr("admin_core.services.cache_service.time.monotonic", lambda: clock["now"])

    backend = MemoryCache()
    backend.set("key", "value", ttl=10)
    assert backend.get("key") == "value"

    clock["now"] += 11
    assert backend.get("key") is MISSING
    assert "key" not in backend.cache


def test_memory_cache_evicts_least_recently_used(monkeypatch):
    clock = {"now": 0.0}

    def tick():
        clock["now"] += 1
        return clock["now"]

    monkeypatch.setattr("admin_core.services.cache_service.time.monotonic", tick)

    backend = MemoryCache(max_size=2)
    backend.set("a", 1)
    backend.set("b", 2)
    backend.get("a")
    backend.set("c", 3)

    assert set(backend.cache) == {"a", "c"}
    assert backend.stats["evictions"] == 1


def test_memory_cache_prefers_expired_entries_over_lru(monkeypatch):
    clock = {"now": 0.0}
    monkeypatch.setattr("admin_core.services.cache_service.time.monotonic", lambda: clock["now"])

    backend = MemoryCache(max_size=2)
    backend.set("short", 1, ttl=5)
    backend.set("long", 2, ttl=500)
    clock["now"] = 10
    backend.set("new", 3)

    assert set(backend.cache) == {"long", "new"}
    assert backend.stats["evictions"] == 0


# --- CacheService ---


def test_set_and_get_are_namespaced(cache):
    cache.set("gateway", {"title": "Stripe"})
    assert cache.get("gateway") == {"title": "Stripe"}
    assert "test:gateway" in cache.backend.cache


def test_values_are_copied(cache):
    value = {"details": {"key": "pk"}}
    cache.set("gateway", value)
    value["details"]["key"] = "changed"

    cached = cache.get("gateway")
    assert cached["details"]["key"] == "pk"

    cached["details"]["key"] = "mutated"
    assert cache.get("gateway")["details"]["key"] == "pk"


def test_invalidate_and_pattern(cache):
    cache.set("public:stripe", 1)
    cache.set("public:paypal", 2)
    cache.set("admin:stripe", 3)

    assert cache.invalidate("admin:stripe") is True
    assert cache.invalidate("admin:stripe") is False
    assert cache.invalidate_pattern("public:") == 2
    assert cache.get_stats()["keys"] == 0


def test_contains_sees_cached_none(cache):
    cache.set("default", None)
    assert cache.contains("default") is True
    assert cache.get("default", default="fallback") is None


async def test_get_or_load_loads_once(cache):
    calls = []

    async def loader():
        calls.append(1)
        return {"title": "Stripe"}

    assert await cache.get_or_load("gateway", loader) == {"title": "Stripe"}
    assert await cache.get_or_load("gateway", loader) == {"title": "Stripe"}
    assert len(calls) == 1


async def test_get_or_load_caches_none_only_when_asked(cache):
    calls = []

    async def loader():
        calls.append(1)
        return None

    await cache.get_or_load("missing", loader)
    await cache.get_or_load("missing", loader)
    assert len(calls) == 2

    await cache.get_or_load("default", loader, cache_none=True)
    await cache.get_or_load("default", loader, cache_none=True)
    assert len(calls) == 3


def test_stats_and_clear(cache):
    cache.set("a", 1)
    cache.get("a")
    cache.get("b")

    stats = cache.get_stats()
    assert stats["namespace"] == "test"
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["hit_rate"] == 0.5

    assert cache.clear() == 1
    assert cache.get_stats()["keys"] == 0
