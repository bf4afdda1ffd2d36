"""
Health check route reporting per-jurisdiction data source circuit state.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from fastapi import APIRouter, Depends

from api.responses import HealthStatus
from api.routes.common import get_registry
from api.routes.exception import handle_exceptions
from datasources.circuit import CircuitState
from datasources.registry import SourceRegistry

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthStatus)
@handle_exceptions
async def health(registry: SourceRegistry = Depends(get_registry)) -> HealthStatus:
    sources = registry.status()
    degraded = any(
        status.state != CircuitState.closed.value
        for per_kind in sources.values()
        for status in per_kind.values()
    )
    return HealthStatus(status="degraded" if degraded else "ok", sources=sources)
