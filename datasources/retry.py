"""
Exponential backoff retry for upstream data source calls.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import random
import time
from dataclasses import dataclass, field, replace
from functools import wraps
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, cast

import httpx

from config import settings
from datasources.exceptions import RetryExhaustedError

log = logging.getLogger(__name__)

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])


def default_retry_predicate(exc: BaseException) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status >= 500 or status == 429
    if isinstance(exc, (httpx.TransportError, asyncio.TimeoutError, TimeoutError, ConnectionError)):
        return True
    return "network" in str(exc).lower()


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = field(default_factory=lambda: settings.retry_max_retries)
    base_delay: float = field(default_factory=lambda: settings.retry_base_delay)
    max_delay: float = field(default_factory=lambda: settings.retry_max_delay)
    jitter: bool = field(default_factory=lambda: settings.retry_jitter)
    jitter_ratio: float = field(default_factory=lambda: settings.retry_jitter_ratio)
    retry_predicate: Callable[[BaseException], bool] = default_retry_predicate

    def delay_for(self, attempt: int, rng: Callable[[], float] = random.random) -> float:
        delay = min(self.base_delay * (2 ** attempt), self.max_delay)
        if self.jitter:
            delay += (rng() - 0.5) * 2.0 * self.jitter_ratio * delay
        return max(0.0, delay)


@dataclass(frozen=True)
class RetryResult(Generic[T]):
    data: T
    attempts: int
    total_time: float


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    rng: Callable[[], float] = random.random,
    clock: Callable[[], float] = time.monotonic,
) -> RetryResult[T]:
    policy = policy or RetryPolicy()
    started = clock()
    last_error: Optional[BaseException] = None

    for attempt in range(policy.max_retries + 1):
        try:
            data = await operation()
            return RetryResult(data=data, attempts=attempt + 1, total_time=clock() - started)
        except Exception as exc:
            last_error = exc
            if attempt == policy.max_retries:
                break
            if not policy.retry_predicate(exc):
                raise
            delay = policy.delay_for(attempt, rng)
            log.warning(
                "Retry attempt %d/%d failed, retrying in %.2fs: %s",
                attempt + 1, policy.max_retries + 1, delay, exc,
            )
            await sleep(delay)

    raise RetryExhaustedError(policy.max_retries + 1, last_error) from last_error


def retry(*, policy: Optional[RetryPolicy] = None, **overrides: Any) -> Callable[[F], F]:
    def decorator(func: F) -> F:
        def _policy() -> RetryPolicy:
            base = policy or RetryPolicy()
            return replace(base, **overrides) if overrides else base

        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                result = await execute_with_retry(lambda: func(*args, **kwargs), _policy())
                return result.data

            return cast(F, async_wrapper)

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            active = _policy()
            last_error: Optional[BaseException] = None
            for attempt in range(active.max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except Exception as exc:
                    last_error = exc
                    if attempt == active.max_retries:
                        break
                    if not active.retry_predicate(exc):
                        raise
                    time.sleep(active.delay_for(attempt))
            raise RetryExhaustedError(active.max_retries + 1, last_error) from last_error

        return cast(F, sync_wrapper)

    return decorator
