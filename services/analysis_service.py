"""
Analysis service that resolves request inputs through the jurisdiction's data sources and runs the correlation, alignment and integrity engines.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from api.requests import AnalysisRequest
from api.responses import (
    AlignmentReport,
    AnalysisReport,
    CorrelationResult,
    DataIntegrityReport,
)
from datasources.registry import SourceRegistry
from datasources.validation import filter_crime_types
from engine import alignment
from engine.anomaly import detect_anomalies
from engine.correlation import correlate, summarize
from engine.integrity import DataIntegrityValidator
from engine.models import CrimeIncident, CrimeType, DateRange, GeographicCoordinate, MoonPhaseData
from engine.trends import analyze_trends, detect_patterns

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisInputs:
    crimes: List[CrimeIncident]
    moon_phases: List[MoonPhaseData]


async def fetch_moon_phases(
    registry: SourceRegistry,
    location: GeographicCoordinate,
    date_range: DateRange,
) -> List[MoonPhaseData]:
    return await registry.get(location.jurisdiction).astronomical.fetch_moon_phases(location, date_range)


async def fetch_crimes(
    registry: SourceRegistry,
    location: GeographicCoordinate,
    date_range: DateRange,
    crime_types: Optional[Sequence[CrimeType]] = None,
) -> List[CrimeIncident]:
    return await registry.get(location.jurisdiction).crime.fetch_crimes(location, date_range, crime_types)


async def resolve_inputs(registry: SourceRegistry, req: AnalysisRequest) -> AnalysisInputs:
    sources = registry.get(req.location.jurisdiction)
    date_range = req.date_range

    async def crimes() -> List[CrimeIncident]:
        if req.crimes is not None:
            return filter_crime_types(req.crimes, req.crime_types)
        return await sources.crime.fetch_crimes(req.location, date_range, req.crime_types)

    async def moon_phases() -> List[MoonPhaseData]:
        if req.moon_phases is not None:
            return list(req.moon_phases)
        return await sources.astronomical.fetch_moon_phases(req.location, date_range)

    crime_list, moon_list = await asyncio.gather(crimes(), moon_phases())
    log.debug(
        "Resolved %d crimes and %d moon phases for %s",
        len(crime_list), len(moon_list), req.location.jurisdiction,
    )
    return AnalysisInputs(crimes=crime_list, moon_phases=moon_list)


async def run_correlations(registry: SourceRegistry, req: AnalysisRequest) -> List[CorrelationResult]:
    inputs = await resolve_inputs(registry, req)
    return correlate(inputs.crimes, inputs.moon_phases)


async def run_statistics(registry: SourceRegistry, req: AnalysisRequest) -> AnalysisReport:
    inputs = await resolve_inputs(registry, req)
    results = correlate(inputs.crimes, inputs.moon_phases)
    trends = analyze_trends(inputs.crimes, inputs.moon_phases)
    return AnalysisReport(
        summary=summarize(results, inputs.crimes, req.location, req.date_range),
        trends=trends,
        pattern=detect_patterns(trends),
        anomalies=detect_anomalies(results),
    )


async def run_alignment(registry: SourceRegistry, req: AnalysisRequest) -> AlignmentReport:
    inputs = await resolve_inputs(registry, req)
    crimes, moon_phases = inputs.crimes, inputs.moon_phases
    if req.target_timezone is not None:
        crimes, moon_phases = alignment.synchronize_timestamps(crimes, moon_phases, req.target_timezone)

    result = alignment.align(crimes, moon_phases, req.max_time_diff)
    return AlignmentReport(
        result=result,
        integrity=alignment.validate_integrity(result),
        statistics=alignment.statistics(result),
    )


async def run_integrity(registry: SourceRegistry, req: AnalysisRequest) -> DataIntegrityReport:
    inputs = await resolve_inputs(registry, req)
    return DataIntegrityValidator().integrity_report(inputs.crimes, inputs.moon_phases, req.date_range)
