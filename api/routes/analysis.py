"""
Analysis routes: moon phases, crime data, lunar-crime correlations, statistical reports, temporal alignment and data integrity.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from api.requests import AnalysisRequest
from api.responses import AlignmentReport, AnalysisReport, CorrelationResult, DataIntegrityReport
from api.routes.common import get_registry
from api.routes.exception import handle_exceptions
from datasources.registry import SourceRegistry
from engine.models import CrimeIncident, CrimeType, DateRange, GeographicCoordinate, MoonPhaseData
from services import analysis_service

router = APIRouter(tags=["Analysis"])


@router.get("/moon-phases", response_model=List[MoonPhaseData], summary="Daily moon phases for a location")
@handle_exceptions
async def moon_phases(
    latitude: float = Query(ge=-90.0, le=90.0),
    longitude: float = Query(ge=-180.0, le=180.0),
    jurisdiction: str = Query(min_length=1),
    start: datetime = Query(),
    end: datetime = Query(),
    address: Optional[str] = Query(default=None),
    registry: SourceRegistry = Depends(get_registry),
) -> List[MoonPhaseData]:
    location = GeographicCoordinate(
        latitude=latitude, longitude=longitude, jurisdiction=jurisdiction, address=address,
    )
    return await analysis_service.fetch_moon_phases(registry, location, DateRange(start=start, end=end))


def _parse_crime_types(values: Optional[List[str]]) -> Optional[List[CrimeType]]:
    if not values:
        return None
    parsed = []
    for value in values:
        category, _, subcategory = value.partition(":")
        if not subcategory:
            raise ValueError(f"crime type must look like category:subcategory, got {value!r}")
        parsed.append(CrimeType(category=category, subcategory=subcategory))
    return parsed


@router.get("/crime-data", response_model=List[CrimeIncident], summary="Crime incidents for a location from the configured feed")
@handle_exceptions
async def crime_data(
    latitude: float = Query(ge=-90.0, le=90.0),
    longitude: float = Query(ge=-180.0, le=180.0),
    jurisdiction: str = Query(min_length=1),
    start: datetime = Query(),
    end: datetime = Query(),
    crime_type: Optional[List[str]] = Query(default=None, alias="crimeType"),
    address: Optional[str] = Query(default=None),
    registry: SourceRegistry = Depends(get_registry),
) -> List[CrimeIncident]:
    location = GeographicCoordinate(
        latitude=latitude, longitude=longitude, jurisdiction=jurisdiction, address=address,
    )
    return await analysis_service.fetch_crimes(
        registry, location, DateRange(start=start, end=end), _parse_crime_types(crime_type),
    )


@router.post("/correlations", response_model=List[CorrelationResult], summary="Per crime type and phase correlations")
@handle_exceptions
async def correlations(
    req: AnalysisRequest,
    registry: SourceRegistry = Depends(get_registry),
) -> List[CorrelationResult]:
    return await analysis_service.run_correlations(registry, req)


@router.post("/statistics", response_model=AnalysisReport, summary="Correlation summary, trends, pattern and anomalies")
@handle_exceptions
async def statistics(
    req: AnalysisRequest,
    registry: SourceRegistry = Depends(get_registry),
) -> AnalysisReport:
    return await analysis_service.run_statistics(registry, req)


@router.post("/alignment", response_model=AlignmentReport, summary="Exclusive crime to moon phase alignment")
@handle_exceptions
async def alignment(
    req: AnalysisRequest,
    registry: SourceRegistry = Depends(get_registry),
) -> AlignmentReport:
    return await analysis_service.run_alignment(registry, req)


@router.post("/integrity", response_model=DataIntegrityReport, summary="Coverage, gaps and quality score")
@handle_exceptions
async def integrity(
    req: AnalysisRequest,
    registry: SourceRegistry = Depends(get_registry),
) -> DataIntegrityReport:
    return await analysis_service.run_integrity(registry, req)
