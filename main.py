"""
Entry point for the Lunar Crime Correlation Engine API server.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI

from api.routes import router
from config import settings
from datasources.registry import SourceRegistry

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    stream=sys.stdout,
)
log = logging.getLogger(__name__)

CACHE_CLEANUP_INTERVAL = 300


async def _cleanup_loop(registry: SourceRegistry) -> None:
    while True:
        await asyncio.sleep(CACHE_CLEANUP_INTERVAL)
        purged = registry.cleanup()
        if purged:
            log.debug("Purged %d expired cache entries", purged)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    registry = SourceRegistry()
    app.state.registry = registry
    if not settings.crime_data_url:
        log.warning("No crime feed configured; requests must supply crime incidents inline")

    cleanup_task = asyncio.create_task(_cleanup_loop(registry))
    try:
        yield
    finally:
        cleanup_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await cleanup_task
        registry.clear()


app = FastAPI(
    title="Lunar Crime Correlation Engine",
    description="Temporal alignment, data integrity validation and statistical correlation of crime incidents with lunar phases.",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router, prefix="/api/v1")


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=4322,
        log_level="info",
        access_log=True,
    )
