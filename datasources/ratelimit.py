"""
Sliding window request rate limiter.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque


@dataclass(frozen=True)
class RateLimitStatus:
    requests_in_window: int
    max_requests: int
    remaining: int
    reset_in: float


class RateLimiter:
    def __init__(
        self,
        max_requests: int,
        window: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window = window
        self._clock = clock
        self._requests: Deque[float] = deque()

    def _prune(self, now: float) -> None:
        while self._requests and now - self._requests[0] >= self.window:
            self._requests.popleft()

    def is_allowed(self) -> bool:
        now = self._clock()
        self._prune(now)
        if len(self._requests) < self.max_requests:
            self._requests.append(now)
            return True
        return False

    @property
    def remaining(self) -> int:
        self._prune(self._clock())
        return max(0, self.max_requests - len(self._requests))

    def time_until_reset(self) -> float:
        now = self._clock()
        self._prune(now)
        if not self._requests:
            return 0.0
        return max(0.0, self.window - (now - self._requests[0]))

    def status(self) -> RateLimitStatus:
        return RateLimitStatus(
            requests_in_window=self.max_requests - self.remaining,
            max_requests=self.max_requests,
            remaining=self.remaining,
            reset_in=self.time_until_reset(),
        )
