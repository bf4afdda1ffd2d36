from datasources.cache import FallbackCache
from datasources.ratelimit import RateLimiter


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_rate_limiter_sliding_window():
    clock = Clock()
    limiter = RateLimiter(max_requests=2, window=60, clock=clock)
    assert limiter.time_until_reset() == 0.0
    assert limiter.is_allowed()
    clock.now = 5.0
    assert limiter.is_allowed()
    assert not limiter.is_allowed()
    assert limiter.remaining == 0

    clock.now = 10.0
    assert limiter.time_until_reset() == 50.0

    clock.now = 60.0
    assert limiter.remaining == 1
    assert limiter.is_allowed()
    status = limiter.status()
    assert status.max_requests == 2
    assert status.remaining == 0
    assert status.requests_in_window == 2


def test_rate_limiter_rejection_is_not_recorded():
    clock = Clock()
    limiter = RateLimiter(max_requests=1, window=10, clock=clock)
    assert limiter.is_allowed()
    clock.now = 5.0
    assert not limiter.is_allowed()
    clock.now = 10.0
    assert limiter.is_allowed()


def test_cache_ttl_boundary_and_eviction():
    clock = Clock()
    cache = FallbackCache(default_ttl=10, clock=clock)
    cache.set("k", "v")
    clock.now = 10.0
    assert cache.get("k") == "v"
    assert cache.has("k")
    clock.now = 10.5
    assert cache.get("k") is None
    assert len(cache) == 0


def test_cache_lookup_keeps_stale_entry():
    clock = Clock()
    cache = FallbackCache(default_ttl=10, clock=clock)
    cache.set("k", [1, 2], ttl=5)
    clock.now = 20.0
    entry = cache.lookup("k")
    assert entry is not None
    assert entry.value == [1, 2]
    assert not entry.is_fresh(clock.now)
    assert cache.stats().expired == 1
    assert cache.lookup("missing") is None


def test_cache_cleanup_purges_expired():
    clock = Clock()
    cache = FallbackCache(default_ttl=10, clock=clock)
    cache.set("old", 1)
    clock.now = 8.0
    cache.set("new", 2)
    clock.now = 12.0
    assert cache.cleanup() == 1
    assert cache.get("new") == 2
    assert cache.stats().size == 1
