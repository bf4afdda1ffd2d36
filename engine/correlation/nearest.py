"""
Non-exclusive nearest moon phase lookup used by the correlation and trend engines.

Unlike the temporal aligner, a moon phase record may be matched by any number
of crimes and no spatial tolerance applies; only the time window bounds the
match.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Tuple

from config import settings
from engine.models import CrimeIncident, MoonPhaseData
from engine.timing import elapsed_ms


def match_window() -> timedelta:
    return timedelta(hours=settings.correlation_match_window_hours)


def nearest_moon_phase(
    timestamp: datetime,
    moon_phases: Sequence[MoonPhaseData],
    window: Optional[timedelta] = None,
) -> Optional[MoonPhaseData]:
    if not moon_phases:
        return None
    if window is None:
        window = match_window()

    closest = moon_phases[0]
    min_diff = elapsed_ms(timestamp, closest.timestamp)
    for phase in moon_phases[1:]:
        diff = elapsed_ms(timestamp, phase.timestamp)
        if diff < min_diff:
            min_diff = diff
            closest = phase

    return closest if min_diff <= window.total_seconds() * 1000.0 else None


def pair_with_moon_phases(
    crimes: Sequence[CrimeIncident],
    moon_phases: Sequence[MoonPhaseData],
    window: Optional[timedelta] = None,
) -> List[Tuple[CrimeIncident, MoonPhaseData]]:
    pairs: List[Tuple[CrimeIncident, MoonPhaseData]] = []
    for crime in crimes:
        phase = nearest_moon_phase(crime.timestamp, moon_phases, window)
        if phase is not None:
            pairs.append((crime, phase))
    return pairs
