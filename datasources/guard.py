"""
Resilient access to one upstream source: fresh cache, rate limit, circuit breaker around a retrying call, and stale cache fallback.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from datasources.cache import FallbackCache
from datasources.circuit import CircuitBreaker
from datasources.exceptions import RateLimitExceededError
from datasources.ratelimit import RateLimiter
from datasources.retry import RetryPolicy, execute_with_retry

log = logging.getLogger(__name__)

T = TypeVar("T")


class ResilientSource(Generic[T]):
    def __init__(
        self,
        name: str,
        breaker: CircuitBreaker,
        limiter: RateLimiter,
        cache: FallbackCache[T],
        policy: RetryPolicy,
        ttl: float,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self.name = name
        self.breaker = breaker
        self.limiter = limiter
        self.cache = cache
        self.policy = policy
        self.ttl = ttl
        self._sleep = sleep
        self._rng = rng

    async def _retrying(self, operation: Callable[[], Awaitable[T]]) -> T:
        result = await execute_with_retry(operation, self.policy, sleep=self._sleep, rng=self._rng)
        if result.attempts > 1:
            log.info("%s succeeded after %d attempts", self.name, result.attempts)
        return result.data

    async def fetch(
        self,
        key: str,
        operation: Callable[[], Awaitable[T]],
        ttl: Optional[float] = None,
    ) -> T:
        # expired entries stay in place as the stale fallback below
        cached = self.cache.lookup(key)
        if cached is not None and self.cache.is_fresh(cached):
            return cached.value

        if not self.limiter.is_allowed():
            raise RateLimitExceededError(self.limiter.time_until_reset())

        try:
            value = await self.breaker.call(lambda: self._retrying(operation))
        except Exception as exc:
            stale = self.cache.lookup(key)
            if stale is None:
                raise
            log.warning("%s failed for %s, serving stale cached value: %s", self.name, key, exc)
            return stale.value

        self.cache.set(key, value, self.ttl if ttl is None else ttl)
        return value
