"""
Local lunar ephemeris: illumination, phase angle, Earth-Moon distance and phase name for a calendar day.

The model is a mean synodic cycle anchored at the 2000-01-06 new moon with a
first-order eccentricity term for distance; it is accurate to within about a
day of phase, which is the resolution the correlation engine buckets on.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterator, List

from config import settings
from engine.enums import MoonPhaseName
from engine.models import DateRange, GeographicCoordinate, MoonPhaseData


@dataclass(frozen=True)
class LunarCycle:
    phase_angle: float
    illumination_percent: float
    distance_km: float

    @property
    def phase_name(self) -> MoonPhaseName:
        return MoonPhaseName.from_angle(self.phase_angle)


def julian_day(day: date) -> int:
    """Julian Day Number of a Gregorian calendar date."""
    a = (14 - day.month) // 12
    y = day.year + 4800 - a
    m = day.month + 12 * a - 3
    return day.day + (153 * m + 2) // 5 + 365 * y + y // 4 - y // 100 + y // 400 - 32045


def lunar_cycle(day: date) -> LunarCycle:
    jd = julian_day(day)
    synodic = settings.synodic_month_days
    days_since_new = (jd - settings.reference_new_moon_jd) % synodic
    angle = days_since_new / synodic * 360.0
    illumination = (1.0 - math.cos(math.radians(angle))) * 50.0

    mean_anomaly = (jd - settings.j2000_jd) / settings.sidereal_month_days * 2.0 * math.pi
    distance = settings.mean_distance_km * (1.0 - settings.orbit_eccentricity * math.cos(mean_anomaly))

    angle = round(angle, 2)
    if angle >= 360.0:
        angle = 0.0
    return LunarCycle(
        phase_angle=angle,
        illumination_percent=min(100.0, max(0.0, round(illumination, 2))),
        distance_km=float(round(distance)),
    )


def iter_days(date_range: DateRange) -> Iterator[date]:
    day = date_range.start.astimezone(timezone.utc).date()
    last = date_range.end.astimezone(timezone.utc).date()
    while day <= last:
        yield day
        day += timedelta(days=1)


def moon_phase_for_day(location: GeographicCoordinate, day: date) -> MoonPhaseData:
    cycle = lunar_cycle(day)
    return MoonPhaseData(
        timestamp=datetime.combine(day, time(0, 0), tzinfo=timezone.utc),
        phase_name=cycle.phase_name,
        illumination_percent=cycle.illumination_percent,
        phase_angle=cycle.phase_angle,
        distance_km=cycle.distance_km,
        location=location,
    )


def moon_phases(location: GeographicCoordinate, date_range: DateRange) -> List[MoonPhaseData]:
    return [moon_phase_for_day(location, day) for day in iter_days(date_range)]
