"""ResponseCache: LRU bound and TTL eviction with an injected clock."""
from credit_pipeline.llm.cache import ResponseCache


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_get_after_put_hits() -> None:
    cache = ResponseCache(max_entries=4, ttl_s=300, clock=_Clock())
    cache.put("k", "v")
    assert cache.get("k") == "v"
    assert cache.hits == 1
    assert cache.get("missing") is None
    assert cache.misses == 1


def test_entries_expire_after_ttl() -> None:
    clock = _Clock()
    cache = ResponseCache(max_entries=4, ttl_s=300, clock=clock)
    cache.put("k", "v")
    clock.now = 299.0
    assert cache.get("k") == "v"
    clock.now = 300.0
    assert cache.get("k") is None
    assert len(cache) == 0


def test_lru_bound_drops_oldest() -> None:
    cache = ResponseCache(max_entries=2, ttl_s=300, clock=_Clock())
    cache.put("a", "1")
    cache.put("b", "2")
    cache.get("a")
    cache.put("c", "3")
    assert cache.get("b") is None
    assert cache.get("a") == "1"
    assert cache.get("c") == "3"


def test_evict_expired_counts_removed() -> None:
    clock = _Clock()
    cache = ResponseCache(max_entries=8, ttl_s=10, clock=clock)
    cache.put("a", "1")
    clock.now = 5.0
    cache.put("b", "2")
    clock.now = 12.0
    assert cache.evict_expired() == 1
    assert len(cache) == 1
