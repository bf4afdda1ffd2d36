"""
Per crime type and moon phase correlation between daily moon illumination and daily crime counts, and the statistical summary built from those results.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from api.responses import CorrelationResult, StatisticalSummary
from config import settings
from engine.correlation.nearest import pair_with_moon_phases
from engine.correlation.significance import pearson, significance
from engine.enums import MoonPhaseName
from engine.models import CrimeIncident, CrimeType, DateRange, GeographicCoordinate, MoonPhaseData
from engine.timing import utc_day

log = logging.getLogger(__name__)

Pair = Tuple[CrimeIncident, MoonPhaseData]


@dataclass(frozen=True)
class DailyPoint:
    day: date
    illumination: float
    crime_count: int


def group_by_crime_type(crimes: Sequence[CrimeIncident]) -> Dict[Tuple[str, str], List[CrimeIncident]]:
    groups: Dict[Tuple[str, str], List[CrimeIncident]] = {}
    for crime in crimes:
        groups.setdefault(crime.crime_type.key, []).append(crime)
    return groups


def daily_series(pairs: Sequence[Pair], phase: MoonPhaseName) -> List[DailyPoint]:
    # first matched illumination of the day wins; counts accumulate
    illumination: Dict[date, float] = {}
    counts: Dict[date, int] = {}
    for crime, moon in pairs:
        if moon.phase_name != phase:
            continue
        day = utc_day(crime.timestamp)
        illumination.setdefault(day, moon.illumination_percent)
        counts[day] = counts.get(day, 0) + 1
    return [DailyPoint(day, illumination[day], counts[day]) for day in sorted(counts)]


def _phase_correlation(
    pairs: Sequence[Pair],
    phase: MoonPhaseName,
    crime_type: CrimeType,
    min_days: int,
) -> Optional[CorrelationResult]:
    series = daily_series(pairs, phase)
    if len(series) < min_days:
        return None

    try:
        r = pearson([p.illumination for p in series], [p.crime_count for p in series])
        p_value, interval = significance(r, len(series), settings.confidence_level)
    except (ValueError, ArithmeticError) as exc:
        log.warning(
            "Skipping correlation for %s/%s and phase %s: %s",
            crime_type.category.value, crime_type.subcategory, phase.value, exc,
        )
        return None

    return CorrelationResult(
        crime_type=crime_type,
        moon_phase=phase,
        correlation_coefficient=r,
        p_value=p_value,
        confidence_interval=interval,
        sample_size=len(series),
        significance_level=settings.significance_level,
    )


def correlate(
    crimes: Sequence[CrimeIncident],
    moon_phases: Sequence[MoonPhaseData],
    window: Optional[timedelta] = None,
    min_days: Optional[int] = None,
) -> List[CorrelationResult]:
    if min_days is None:
        min_days = settings.correlation_min_days

    results: List[CorrelationResult] = []
    for group in group_by_crime_type(crimes).values():
        pairs = pair_with_moon_phases(group, moon_phases, window)
        if len(pairs) < min_days:
            continue
        crime_type = group[0].crime_type
        for phase in MoonPhaseName.ordered():
            result = _phase_correlation(pairs, phase, crime_type, min_days)
            if result is not None:
                results.append(result)

    log.debug("Computed %d correlation results from %d crimes", len(results), len(crimes))
    return results


def summarize(
    results: Sequence[CorrelationResult],
    crimes: Sequence[CrimeIncident],
    location: GeographicCoordinate,
    date_range: DateRange,
) -> StatisticalSummary:
    significant = [r for r in results if r.p_value <= settings.significance_level]
    total_samples = sum(r.sample_size for r in results)
    overall_correlation = (
        sum(r.correlation_coefficient * r.sample_size for r in results) / total_samples
        if total_samples > 0 else 0.0
    )
    overall_significance = min((r.p_value for r in results), default=1.0)

    return StatisticalSummary(
        total_crime_incidents=len(crimes),
        date_range=date_range,
        location=location,
        correlation_results=list(results),
        significant_correlations=significant,
        overall_significance=overall_significance,
        overall_correlation=overall_correlation,
        total_sample_size=total_samples,
        analysis_date_range=date_range,
        confidence_level=settings.confidence_level,
    )
