"""
In-memory TTL cache whose expired entries stay reachable as a stale fallback.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

from config import settings

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    value: V
    inserted_at: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return now - self.inserted_at <= self.ttl


@dataclass(frozen=True)
class CacheStats:
    size: int
    expired: int


class FallbackCache(Generic[V]):
    def __init__(
        self,
        default_ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = settings.cache_default_ttl if default_ttl is None else default_ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry[V]] = {}

    def set(self, key: str, value: V, ttl: float | None = None) -> None:
        self._entries[key] = CacheEntry(value, self._clock(), self.default_ttl if ttl is None else ttl)

    def get(self, key: str) -> Optional[V]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_fresh(self._clock()):
            del self._entries[key]
            return None
        return entry.value

    def is_fresh(self, entry: CacheEntry[V]) -> bool:
        return entry.is_fresh(self._clock())

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def lookup(self, key: str) -> Optional[CacheEntry[V]]:
        return self._entries.get(key)

    def cleanup(self) -> int:
        now = self._clock()
        expired = [k for k, e in self._entries.items() if not e.is_fresh(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> CacheStats:
        now = self._clock()
        return CacheStats(
            size=len(self._entries),
            expired=sum(1 for e in self._entries.values() if not e.is_fresh(now)),
        )
