"""
Shared utilities and dependencies for API route modules.

Provides the registry dependency handed to every router and the single place
where data source failures are translated to HTTP responses, so individual
route files stay thin.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import math

from fastapi import HTTPException, Request

from datasources.exceptions import CircuitOpenError, DataSourceError, RateLimitExceededError
from datasources.registry import SourceRegistry


def get_registry(request: Request) -> SourceRegistry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        registry = SourceRegistry()
        request.app.state.registry = registry
    return registry


def to_http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, RateLimitExceededError):
        return HTTPException(
            status_code=429,
            detail=str(exc),
            headers={"Retry-After": str(max(1, math.ceil(exc.retry_after)))},
        )
    if isinstance(exc, CircuitOpenError):
        return HTTPException(status_code=503, detail=str(exc))
    if isinstance(exc, DataSourceError):
        return HTTPException(status_code=502, detail=str(exc))
    if isinstance(exc, ValueError):
        return HTTPException(status_code=400, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))
