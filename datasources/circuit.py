"""
Circuit breaker guarding an upstream data source.

A run of consecutive failures opens the circuit; while open, calls fail fast
until the recovery timeout has elapsed since the last failure, after which a
single probe call decides whether to close or re-open it.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

from datasources.exceptions import CircuitOpenError

log = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(str, Enum):
    closed = "CLOSED"
    open = "OPEN"
    half_open = "HALF_OPEN"


@dataclass(frozen=True)
class CircuitSnapshot:
    state: CircuitState
    failures: int
    last_failure_time: Optional[float]


class CircuitBreaker:
    def __init__(
        self,
        name: str,
        failure_threshold: int,
        recovery_timeout: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self._clock = clock
        self._state = CircuitState.closed
        self._failures = 0
        self._last_failure_time: Optional[float] = None
        self._probe_in_flight = False

    @property
    def state(self) -> CircuitState:
        return self._state

    def snapshot(self) -> CircuitSnapshot:
        return CircuitSnapshot(self._state, self._failures, self._last_failure_time)

    def _transition(self, state: CircuitState) -> None:
        if state != self._state:
            log.info("Circuit %s: %s -> %s", self.name, self._state.value, state.value)
            self._state = state

    def _admit(self) -> None:
        if self._state == CircuitState.open:
            elapsed = self._clock() - (self._last_failure_time or 0.0)
            if elapsed < self.recovery_timeout:
                raise CircuitOpenError()
            self._transition(CircuitState.half_open)
        if self._state == CircuitState.half_open:
            if self._probe_in_flight:
                raise CircuitOpenError()
            self._probe_in_flight = True

    def _on_success(self) -> None:
        if self._state == CircuitState.half_open:
            self._failures = 0
            self._transition(CircuitState.closed)

    def _on_failure(self) -> None:
        self._failures += 1
        self._last_failure_time = self._clock()
        if self._state == CircuitState.half_open or self._failures >= self.failure_threshold:
            self._transition(CircuitState.open)

    async def call(self, operation: Callable[[], Awaitable[T]]) -> T:
        self._admit()
        probing = self._state == CircuitState.half_open
        try:
            result = await operation()
        except Exception:
            self._on_failure()
            raise
        else:
            self._on_success()
            return result
        finally:
            if probing:
                self._probe_in_flight = False

    def reset(self) -> None:
        self._failures = 0
        self._last_failure_time = None
        self._probe_in_flight = False
        self._transition(CircuitState.closed)
