"""
Moon phase data for a location and date range, computed by the local ephemeris behind the astronomical source guard.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import date, timezone
from typing import List, Optional

from config import settings
from datasources.guard import ResilientSource
from datasources.validation import check_availability
from engine import ephemeris
from engine.models import DateRange, GeographicCoordinate, MoonPhaseData


def cache_key(location: GeographicCoordinate, date_range: DateRange) -> str:
    start = date_range.start.astimezone(timezone.utc).date().isoformat()
    end = date_range.end.astimezone(timezone.utc).date().isoformat()
    return f"moon:{location.latitude}:{location.longitude}:{start}:{end}"


class AstronomicalDataFetcher:
    def __init__(self, source: ResilientSource[List[MoonPhaseData]]) -> None:
        self.source = source

    def check_availability(
        self,
        location: GeographicCoordinate,
        date_range: DateRange,
        today: Optional[date] = None,
    ) -> None:
        check_availability(
            location, date_range,
            settings.astronomical_max_years_back, settings.astronomical_max_years_ahead,
            "Moon phase", today,
        )

    async def fetch_moon_phases(self, location: GeographicCoordinate, date_range: DateRange) -> List[MoonPhaseData]:
        self.check_availability(location, date_range)

        async def compute() -> List[MoonPhaseData]:
            return ephemeris.moon_phases(location, date_range)

        return await self.source.fetch(cache_key(location, date_range), compute)
