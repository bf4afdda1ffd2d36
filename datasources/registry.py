"""
Per-jurisdiction registry of resilient data sources.

Each jurisdiction gets its own circuit breakers and caches so a failing feed for
one jurisdiction never trips requests for another. Rate limiters guard the
upstream quota and are shared per source across jurisdictions. Only the most
recently used jurisdictions are kept. The registry is created by the
application lifespan and handed to routes through dependency injection.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from api.responses import SourceStatus
from config import SOURCE_ASTRONOMICAL, SOURCE_CRIME, settings
from datasources.astronomical import AstronomicalDataFetcher
from datasources.cache import FallbackCache
from datasources.circuit import CircuitBreaker
from datasources.crime import CrimeDataFetcher
from datasources.guard import ResilientSource
from datasources.ratelimit import RateLimiter
from datasources.retry import RetryPolicy

log = logging.getLogger(__name__)


@dataclass
class JurisdictionSources:
    jurisdiction: str
    astronomical: AstronomicalDataFetcher
    crime: CrimeDataFetcher

    def sources(self) -> Dict[str, ResilientSource]:
        return {
            SOURCE_ASTRONOMICAL: self.astronomical.source,
            SOURCE_CRIME: self.crime.source,
        }


class SourceRegistry:
    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: Callable[[], float] = random.random,
        crime_url: Optional[str] = None,
        crime_transport: Optional[httpx.AsyncBaseTransport] = None,
        max_jurisdictions: Optional[int] = None,
    ) -> None:
        self._clock = clock
        self._sleep = sleep
        self._rng = rng
        self._crime_url = crime_url
        self._crime_transport = crime_transport
        self.max_jurisdictions = max_jurisdictions if max_jurisdictions is not None else settings.registry_max_jurisdictions
        # least recently used first
        self._jurisdictions: OrderedDict[str, JurisdictionSources] = OrderedDict()
        # one upstream quota per source, shared by every jurisdiction
        self._limiters: Dict[str, RateLimiter] = {}

    def _limiter(self, kind: str) -> RateLimiter:
        limiter = self._limiters.get(kind)
        if limiter is None:
            limiter = RateLimiter(
                getattr(settings, f"{kind}_rate_limit"),
                getattr(settings, f"{kind}_rate_window"),
                clock=self._clock,
            )
            self._limiters[kind] = limiter
        return limiter

    def _source(self, kind: str, jurisdiction: str) -> ResilientSource:
        def cfg(name: str) -> Any:
            return getattr(settings, f"{kind}_{name}")

        ttl = cfg("cache_ttl")
        return ResilientSource(
            name=f"{kind}[{jurisdiction}]",
            breaker=CircuitBreaker(
                f"{kind}[{jurisdiction}]",
                failure_threshold=cfg("failure_threshold"),
                recovery_timeout=cfg("recovery_timeout"),
                clock=self._clock,
            ),
            limiter=self._limiter(kind),
            cache=FallbackCache(default_ttl=ttl, clock=self._clock),
            policy=RetryPolicy(max_retries=cfg("max_retries"), max_delay=cfg("max_delay")),
            ttl=ttl,
            sleep=self._sleep,
            rng=self._rng,
        )

    def get(self, jurisdiction: str) -> JurisdictionSources:
        sources = self._jurisdictions.get(jurisdiction)
        if sources is not None:
            self._jurisdictions.move_to_end(jurisdiction)
            return sources

        while len(self._jurisdictions) >= max(1, self.max_jurisdictions):
            evicted, _ = self._jurisdictions.popitem(last=False)
            log.info("Evicting data sources for least recently used jurisdiction %s", evicted)

        log.debug("Creating data sources for jurisdiction %s", jurisdiction)
        sources = JurisdictionSources(
            jurisdiction=jurisdiction,
            astronomical=AstronomicalDataFetcher(self._source(SOURCE_ASTRONOMICAL, jurisdiction)),
            crime=CrimeDataFetcher(
                self._source(SOURCE_CRIME, jurisdiction),
                base_url=self._crime_url,
                transport=self._crime_transport,
            ),
        )
        self._jurisdictions[jurisdiction] = sources
        return sources

    def evict(self, jurisdiction: str) -> None:
        self._jurisdictions.pop(jurisdiction, None)

    def __len__(self) -> int:
        return len(self._jurisdictions)

    def status(self) -> Dict[str, Dict[str, SourceStatus]]:
        report: Dict[str, Dict[str, SourceStatus]] = {}
        for jurisdiction, sources in self._jurisdictions.items():
            report[jurisdiction] = {}
            for kind, source in sources.sources().items():
                snap = source.breaker.snapshot()
                report[jurisdiction][kind] = SourceStatus(
                    state=snap.state.value,
                    failures=snap.failures,
                    last_failure_time=snap.last_failure_time,
                    rate_limit_remaining=source.limiter.remaining,
                    cached_entries=len(source.cache),
                )
        return report

    def cleanup(self) -> int:
        return sum(
            source.cache.cleanup()
            for sources in self._jurisdictions.values()
            for source in sources.sources().values()
        )

    def clear(self) -> None:
        self._jurisdictions.clear()
        self._limiters.clear()
