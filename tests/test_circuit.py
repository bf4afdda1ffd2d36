import asyncio

import pytest

from datasources.circuit import CircuitBreaker, CircuitState
from datasources.exceptions import CircuitOpenError


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


async def _fail():
    raise RuntimeError("upstream down")


async def _ok():
    return "ok"


@pytest.mark.asyncio
async def test_opens_after_threshold_and_fails_fast():
    breaker = CircuitBreaker("test", failure_threshold=2, recovery_timeout=30, clock=Clock())
    calls = []

    async def op():
        calls.append(1)
        raise RuntimeError("upstream down")

    for _ in range(2):
        with pytest.raises(RuntimeError):
            await breaker.call(op)

    with pytest.raises(CircuitOpenError) as info:
        await breaker.call(op)
    assert "OPEN" in str(info.value)
    assert len(calls) == 2
    assert breaker.state == CircuitState.open


@pytest.mark.asyncio
async def test_half_open_probe_success_closes():
    clock = Clock()
    breaker = CircuitBreaker("test", failure_threshold=1, recovery_timeout=30, clock=clock)
    with pytest.raises(RuntimeError):
        await breaker.call(_fail)

    clock.now = 29.0
    with pytest.raises(CircuitOpenError):
        await breaker.call(_ok)

    clock.now = 30.0
    assert await breaker.call(_ok) == "ok"
    snap = breaker.snapshot()
    assert snap.state == CircuitState.closed
    assert snap.failures == 0


@pytest.mark.asyncio
async def test_half_open_probe_failure_reopens():
    clock = Clock()
    breaker = CircuitBreaker("test", failure_threshold=1, recovery_timeout=10, clock=clock)
    with pytest.raises(RuntimeError):
        await breaker.call(_fail)

    clock.now = 15.0
    with pytest.raises(RuntimeError):
        await breaker.call(_fail)
    assert breaker.state == CircuitState.open
    assert breaker.snapshot().last_failure_time == 15.0

    with pytest.raises(CircuitOpenError):
        await breaker.call(_ok)


@pytest.mark.asyncio
async def test_only_one_probe_in_flight():
    clock = Clock()
    breaker = CircuitBreaker("test", failure_threshold=1, recovery_timeout=10, clock=clock)
    with pytest.raises(RuntimeError):
        await breaker.call(_fail)
    clock.now = 10.0

    release = asyncio.Event()

    async def slow():
        await release.wait()
        return "probe"

    probe = asyncio.create_task(breaker.call(slow))
    await asyncio.sleep(0)
    assert breaker.state == CircuitState.half_open
    with pytest.raises(CircuitOpenError):
        await breaker.call(_ok)

    release.set()
    assert await probe == "probe"
    assert breaker.state == CircuitState.closed


@pytest.mark.asyncio
async def test_success_while_closed_keeps_failure_count():
    breaker = CircuitBreaker("test", failure_threshold=3, recovery_timeout=10, clock=Clock())
    with pytest.raises(RuntimeError):
        await breaker.call(_fail)
    await breaker.call(_ok)
    with pytest.raises(RuntimeError):
        await breaker.call(_fail)
    assert breaker.snapshot().failures == 2
    assert breaker.state == CircuitState.closed

    with pytest.raises(RuntimeError):
        await breaker.call(_fail)
    assert breaker.state == CircuitState.open

    breaker.reset()
    assert breaker.snapshot().failures == 0
    assert breaker.state == CircuitState.closed
