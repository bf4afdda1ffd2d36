"""
Crime incident feed client.

Fetches JSON incident records for a jurisdiction and date range from the
configured feed URL through the crime source guard, then validates,
deduplicates and filters them by crime type. Requests outside the feed's
history window are rejected before any call is made. With no feed configured
the client returns no incidents.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import httpx

from config import settings
from datasources.exceptions import DataSourceUnavailable
from datasources.guard import ResilientSource
from datasources.validation import (
    check_availability,
    extract_records,
    filter_crime_types,
    parse_crime_incidents,
)
from engine.models import CrimeIncident, CrimeType, DateRange, GeographicCoordinate

log = logging.getLogger(__name__)


def cache_key(
    location: GeographicCoordinate,
    date_range: DateRange,
    crime_types: Optional[Sequence[CrimeType]] = None,
) -> str:
    types = ",".join(sorted(f"{ct.category.value}:{ct.subcategory.lower()}" for ct in crime_types or ()))
    return f"crime:{location.jurisdiction}:{date_range.start.isoformat()}:{date_range.end.isoformat()}:{types}"


class CrimeDataFetcher:
    def __init__(
        self,
        source: ResilientSource[List[CrimeIncident]],
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.source = source
        self.base_url = base_url if base_url is not None else settings.crime_data_url
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    def check_availability(
        self,
        location: GeographicCoordinate,
        date_range: DateRange,
        today: Optional[date] = None,
    ) -> None:
        check_availability(
            location, date_range,
            settings.crime_max_years_back, settings.crime_max_years_ahead,
            "Crime", today,
        )

    def _params(
        self,
        location: GeographicCoordinate,
        date_range: DateRange,
        crime_types: Optional[Sequence[CrimeType]] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "jurisdiction": location.jurisdiction,
            "latitude": location.latitude,
            "longitude": location.longitude,
            "start": date_range.start.isoformat(),
            "end": date_range.end.isoformat(),
        }
        if crime_types:
            params["crimeType"] = [f"{ct.category.value}:{ct.subcategory}" for ct in crime_types]
        return params

    async def _request(
        self,
        location: GeographicCoordinate,
        date_range: DateRange,
        crime_types: Optional[Sequence[CrimeType]] = None,
    ) -> List[CrimeIncident]:
        headers = {"User-Agent": settings.user_agent, "Accept": "application/json"}
        params = self._params(location, date_range, crime_types)
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.get(self.base_url, params=params, headers=headers)
        status = resp.status_code
        # 5xx and 429 propagate as HTTPStatusError so the retry policy sees them
        if 400 <= status < 500 and status != 429:
            raise DataSourceUnavailable(f"Crime feed rejected request with HTTP {status}: {self.base_url}")
        resp.raise_for_status()
        try:
            records = extract_records(resp.json())
        except ValueError as exc:
            raise DataSourceUnavailable(f"Unexpected crime feed payload from {self.base_url}: {exc}") from exc
        # feeds may ignore the type parameter
        incidents = filter_crime_types(parse_crime_incidents(records), crime_types)
        log.debug("Fetched %d crime incidents for %s", len(incidents), location.jurisdiction)
        return incidents

    async def fetch_crimes(
        self,
        location: GeographicCoordinate,
        date_range: DateRange,
        crime_types: Optional[Sequence[CrimeType]] = None,
    ) -> List[CrimeIncident]:
        self.check_availability(location, date_range)
        if not self.configured:
            log.debug("No crime feed configured, returning no incidents for %s", location.jurisdiction)
            return []
        return await self.source.fetch(
            cache_key(location, date_range, crime_types),
            lambda: self._request(location, date_range, crime_types),
        )
