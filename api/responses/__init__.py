"""
Response models for API endpoints and engine results.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer
from pydantic.alias_generators import to_camel

from engine.enums import GapSeverity, GapType, IssueSeverity, IssueType, MoonPhaseName, PatternType
from engine.models import CrimeIncident, CrimeType, DateRange, GeographicCoordinate, MoonPhaseData


def _coerce(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _coerce(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_coerce(v) for v in obj]
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    return obj


class NpModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    @model_serializer(mode="wrap")
    def _serialize(self, handler: Any) -> Any:
        return _coerce(handler(self))


class TemporalAlignment(NpModel):

    crime_incident: CrimeIncident
    moon_phase: MoonPhaseData
    time_difference_ms: float = Field(ge=0.0)


class AlignmentResult(NpModel):

    alignments: List[TemporalAlignment]
    unaligned_crimes: List[CrimeIncident]
    unaligned_moon_phases: List[MoonPhaseData]
    total_crimes: int
    total_moon_phases: int
    alignment_accuracy: float


class AlignmentIntegrity(NpModel):

    is_valid: bool
    errors: List[str]
    warnings: List[str]


class AlignmentStatistics(NpModel):

    total_alignments: int
    average_time_difference_ms: float
    max_time_difference_ms: float
    min_time_difference_ms: float
    alignment_accuracy: float


class RangeClassification(NpModel):

    in_range: List[CrimeIncident]
    out_of_range: List[CrimeIncident]
    moon_phase_range: Optional[DateRange] = None


class TemporalGap(NpModel):

    start_date: datetime
    end_date: datetime
    duration_days: int = Field(ge=1)
    type: GapType
    severity: GapSeverity


class CoverageCheck(NpModel):

    coverage_percent: float = Field(ge=0.0, le=100.0)
    gaps: List[TemporalGap]
    has_sufficient_coverage: bool


class DataQualityIssue(NpModel):

    type: IssueType
    severity: IssueSeverity
    message: str
    affected_records: Optional[int] = None
    date_range: Optional[DateRange] = None


class DataQualityMetrics(NpModel):

    total_crime_incidents: int
    total_moon_phases: int
    crime_incidents_in_range: int
    crime_incidents_out_of_range: int
    temporal_coverage_percent: float = Field(ge=0.0, le=100.0)
    data_gaps: List[TemporalGap]
    quality_score: float = Field(ge=0.0, le=100.0)
    issues: List[DataQualityIssue]


class DataIntegrityReport(NpModel):

    is_valid: bool
    quality_metrics: DataQualityMetrics
    recommendations: List[str] = Field(min_length=1)
    validation_timestamp: datetime


class CorrelationResult(NpModel):

    crime_type: CrimeType
    moon_phase: MoonPhaseName
    correlation_coefficient: float = Field(ge=-1.0, le=1.0)
    p_value: float = Field(ge=0.0, le=1.0)
    confidence_interval: Tuple[float, float]
    sample_size: int = Field(ge=1)
    significance_level: float = Field(ge=0.0, le=1.0)

    @field_validator("confidence_interval")
    @classmethod
    def ordered_interval(cls, value: Tuple[float, float]) -> Tuple[float, float]:
        lo, hi = value
        if not -1.0 <= lo <= hi <= 1.0:
            raise ValueError(f"confidence interval out of order or bounds: {value}")
        return value


class StatisticalSummary(NpModel):

    total_crime_incidents: int
    date_range: DateRange
    location: GeographicCoordinate
    correlation_results: List[CorrelationResult]
    significant_correlations: List[CorrelationResult]
    overall_significance: float = Field(ge=0.0, le=1.0)
    overall_correlation: float
    total_sample_size: int
    analysis_date_range: DateRange
    confidence_level: float


class TrendAnalysisResult(NpModel):

    moon_phase: MoonPhaseName
    crime_count: int
    average_count: float
    standard_deviation: float
    is_anomaly: bool
    anomaly_score: float


class PatternDetectionResult(NpModel):

    pattern: PatternType
    confidence: float = Field(ge=0.0, le=1.0)
    description: str


class AnalysisReport(NpModel):

    summary: StatisticalSummary
    trends: List[TrendAnalysisResult]
    pattern: PatternDetectionResult
    anomalies: List[CorrelationResult]


class AlignmentReport(NpModel):

    result: AlignmentResult
    integrity: AlignmentIntegrity
    statistics: AlignmentStatistics


class SourceStatus(NpModel):

    state: str
    failures: int
    last_failure_time: Optional[float] = None
    rate_limit_remaining: int
    cached_entries: int


class HealthStatus(NpModel):

    status: str
    sources: Dict[str, Dict[str, SourceStatus]] = Field(default_factory=dict)
