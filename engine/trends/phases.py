"""
Crime counts bucketed by nearest moon phase, scored against the mean of all eight phases.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import timedelta
from typing import Dict, List, Optional, Sequence

import numpy as np

from api.responses import TrendAnalysisResult
from config import settings
from engine.correlation.nearest import nearest_moon_phase
from engine.enums import MoonPhaseName
from engine.models import CrimeIncident, MoonPhaseData


def counts_by_phase(
    crimes: Sequence[CrimeIncident],
    moon_phases: Sequence[MoonPhaseData],
    window: Optional[timedelta] = None,
) -> Dict[MoonPhaseName, int]:
    counts = {phase: 0 for phase in MoonPhaseName.ordered()}
    for crime in crimes:
        nearest = nearest_moon_phase(crime.timestamp, moon_phases, window)
        if nearest is not None:
            counts[nearest.phase_name] += 1
    return counts


def analyze_trends(
    crimes: Sequence[CrimeIncident],
    moon_phases: Sequence[MoonPhaseData],
    z_threshold: float | None = None,
) -> List[TrendAnalysisResult]:
    if z_threshold is None:
        z_threshold = settings.trend_anomaly_z

    counts = counts_by_phase(crimes, moon_phases)
    arr = np.array(list(counts.values()), dtype=float)
    mean = float(arr.mean())
    std = float(arr.std())

    results: List[TrendAnalysisResult] = []
    for phase, count in counts.items():
        score = abs(count - mean) / std if std > 0 else 0.0
        results.append(TrendAnalysisResult(
            moon_phase=phase,
            crime_count=count,
            average_count=mean,
            standard_deviation=std,
            is_anomaly=score > z_threshold,
            anomaly_score=score,
        ))
    return results
