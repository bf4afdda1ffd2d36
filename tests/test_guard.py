import pytest

from datasources.cache import FallbackCache
from datasources.circuit import CircuitBreaker, CircuitState
from datasources.exceptions import CircuitOpenError, RateLimitExceededError, RetryExhaustedError
from datasources.guard import ResilientSource
from datasources.ratelimit import RateLimiter
from datasources.retry import RetryPolicy


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


async def _no_sleep(delay):
    return None


def _source(clock, threshold=3, max_requests=10, ttl=10.0):
    return ResilientSource(
        name="crime[NYC]",
        breaker=CircuitBreaker("crime[NYC]", failure_threshold=threshold, recovery_timeout=30, clock=clock),
        limiter=RateLimiter(max_requests, 60, clock=clock),
        cache=FallbackCache(default_ttl=ttl, clock=clock),
        policy=RetryPolicy(max_retries=1, base_delay=0.0, jitter=False),
        ttl=ttl,
        sleep=_no_sleep,
    )


@pytest.mark.asyncio
async def test_fresh_cache_hit_skips_operation():
    source = _source(Clock())
    calls = []

    async def op():
        calls.append(1)
        return ["a"]

    assert await source.fetch("k", op) == ["a"]
    assert await source.fetch("k", op) == ["a"]
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_failure_falls_back_to_stale_value():
    clock = Clock()
    source = _source(clock)

    async def ok():
        return ["cached"]

    async def down():
        raise ConnectionError("network down")

    await source.fetch("k", ok)
    clock.now = 100.0
    assert await source.fetch("k", down) == ["cached"]


@pytest.mark.asyncio
async def test_failure_without_cache_propagates():
    source = _source(Clock())

    async def down():
        raise ConnectionError("network down")

    with pytest.raises(RetryExhaustedError):
        await source.fetch("k", down)


@pytest.mark.asyncio
async def test_rate_limit_rejects_before_calling():
    source = _source(Clock(), max_requests=1)
    calls = []

    async def op():
        calls.append(1)
        return 1

    await source.fetch("a", op)
    with pytest.raises(RateLimitExceededError) as info:
        await source.fetch("b", op)
    assert info.value.retry_after == 60.0
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_open_circuit_fails_fast():
    source = _source(Clock(), threshold=1)
    calls = []

    async def down():
        calls.append(1)
        raise ConnectionError("network down")

    with pytest.raises(RetryExhaustedError):
        await source.fetch("a", down)
    assert source.breaker.state == CircuitState.open

    with pytest.raises(CircuitOpenError):
        await source.fetch("b", down)
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_per_call_ttl_override():
    clock = Clock()
    source = _source(clock, ttl=10.0)
    calls = []

    async def op():
        calls.append(1)
        return len(calls)

    await source.fetch("k", op, ttl=100.0)
    clock.now = 50.0
    assert await source.fetch("k", op) == 1
