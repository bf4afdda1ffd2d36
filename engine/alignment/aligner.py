"""
Temporal alignment of crime incidents with moon phase observations.

Each crime (in timestamp order) is paired with the closest unused moon phase
record that lies inside the spatial tolerance box and the maximum time
difference. Matching is greedy: a record taken by an earlier crime is never
reconsidered, so the total time difference is not globally minimal.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import List, Optional, Sequence, Set, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from api.responses import AlignmentIntegrity, AlignmentResult, AlignmentStatistics, TemporalAlignment
from config import MS_PER_DAY, MS_PER_HOUR, settings
from engine.models import CrimeIncident, GeographicCoordinate, MoonPhaseData
from engine.timing import elapsed_ms

log = logging.getLogger(__name__)


def locations_compatible(a: GeographicCoordinate, b: GeographicCoordinate, tolerance_deg: float) -> bool:
    # axis-aligned box of roughly 100 km per degree, not great-circle distance
    return (
        abs(a.latitude - b.latitude) <= tolerance_deg
        and abs(a.longitude - b.longitude) <= tolerance_deg
    )


class TimestampAligner:
    def __init__(
        self,
        max_time_diff: Optional[timedelta] = None,
        location_tolerance_deg: Optional[float] = None,
    ) -> None:
        if max_time_diff is None:
            max_time_diff = timedelta(hours=settings.alignment_max_time_diff_hours)
        if location_tolerance_deg is None:
            location_tolerance_deg = settings.alignment_location_tolerance_deg
        self.max_time_diff_ms = max_time_diff.total_seconds() * 1000.0
        self.location_tolerance_deg = location_tolerance_deg

    def align(
        self,
        crimes: Sequence[CrimeIncident],
        moon_phases: Sequence[MoonPhaseData],
    ) -> AlignmentResult:
        sorted_crimes = sorted(crimes, key=lambda c: c.timestamp)
        sorted_phases = sorted(moon_phases, key=lambda m: m.timestamp)

        alignments: List[TemporalAlignment] = []
        unaligned: List[CrimeIncident] = []
        used: Set[int] = set()

        for crime in sorted_crimes:
            match = self._closest(crime, sorted_phases, used)
            if match is None:
                unaligned.append(crime)
                continue
            index, diff_ms = match
            used.add(index)
            alignments.append(TemporalAlignment(
                crime_incident=crime,
                moon_phase=sorted_phases[index],
                time_difference_ms=diff_ms,
            ))

        accuracy = (len(alignments) / len(crimes)) * 100.0 if crimes else 0.0
        return AlignmentResult(
            alignments=alignments,
            unaligned_crimes=unaligned,
            unaligned_moon_phases=[m for i, m in enumerate(sorted_phases) if i not in used],
            total_crimes=len(crimes),
            total_moon_phases=len(moon_phases),
            alignment_accuracy=accuracy,
        )

    def _closest(
        self,
        crime: CrimeIncident,
        phases: Sequence[MoonPhaseData],
        used: Set[int],
    ) -> Optional[Tuple[int, float]]:
        best: Optional[Tuple[int, float]] = None
        for i, phase in enumerate(phases):
            if i in used:
                continue
            if not locations_compatible(crime.location, phase.location, self.location_tolerance_deg):
                continue
            diff = elapsed_ms(crime.timestamp, phase.timestamp)
            if diff > self.max_time_diff_ms:
                continue
            if best is None or diff < best[1]:
                best = (i, diff)
        return best


def align(
    crimes: Sequence[CrimeIncident],
    moon_phases: Sequence[MoonPhaseData],
    max_time_diff: Optional[timedelta] = None,
) -> AlignmentResult:
    return TimestampAligner(max_time_diff=max_time_diff).align(crimes, moon_phases)


def synchronize_timestamps(
    crimes: Sequence[CrimeIncident],
    moon_phases: Sequence[MoonPhaseData],
    target_timezone: Optional[str] = None,
) -> Tuple[List[CrimeIncident], List[MoonPhaseData]]:
    """Express every timestamp in ``target_timezone``.

    The instants are unchanged, only their zone; all other fields are copied
    verbatim.
    """
    if target_timezone is None:
        target_timezone = settings.alignment_default_timezone
    try:
        zone = ZoneInfo(target_timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {target_timezone!r}") from exc

    synced_crimes = [
        c.model_copy(update={"timestamp": c.timestamp.astimezone(zone)}) for c in crimes
    ]
    synced_phases = [
        m.model_copy(update={"timestamp": m.timestamp.astimezone(zone)}) for m in moon_phases
    ]
    return synced_crimes, synced_phases


def validate_integrity(result: AlignmentResult) -> AlignmentIntegrity:
    errors: List[str] = []
    warnings: List[str] = []
    accuracy = result.alignment_accuracy

    if accuracy < settings.alignment_accuracy_error:
        errors.append(
            f"Low alignment accuracy: {accuracy:.1f}% "
            f"(expected >{settings.alignment_accuracy_error:g}%)"
        )
    elif accuracy < settings.alignment_accuracy_warning:
        warnings.append(
            f"Moderate alignment accuracy: {accuracy:.1f}% "
            f"(recommended >{settings.alignment_accuracy_warning:g}%)"
        )

    if result.alignments:
        ordered = sorted(result.alignments, key=lambda a: a.crime_incident.timestamp)
        max_gap_ms = settings.alignment_max_gap_days * MS_PER_DAY
        for prev, curr in zip(ordered, ordered[1:]):
            gap = elapsed_ms(curr.crime_incident.timestamp, prev.crime_incident.timestamp)
            if gap > max_gap_ms:
                warnings.append(f"Large temporal gap detected: {round(gap / MS_PER_DAY)} days")

        avg_diff = sum(a.time_difference_ms for a in result.alignments) / len(result.alignments)
        if avg_diff > settings.alignment_max_avg_diff_hours * MS_PER_HOUR:
            warnings.append(f"High average time difference: {round(avg_diff / MS_PER_HOUR)} hours")

    if errors:
        log.info("Alignment integrity failed: %s", "; ".join(errors))
    return AlignmentIntegrity(
        is_valid=not errors,
        errors=[e.strip() for e in errors],
        warnings=[w.strip() for w in warnings],
    )


def statistics(result: AlignmentResult) -> AlignmentStatistics:
    diffs = [a.time_difference_ms for a in result.alignments]
    if not diffs:
        return AlignmentStatistics(
            total_alignments=0,
            average_time_difference_ms=0.0,
            max_time_difference_ms=0.0,
            min_time_difference_ms=0.0,
            alignment_accuracy=0.0,
        )
    return AlignmentStatistics(
        total_alignments=len(diffs),
        average_time_difference_ms=sum(diffs) / len(diffs),
        max_time_difference_ms=max(diffs),
        min_time_difference_ms=min(diffs),
        alignment_accuracy=result.alignment_accuracy,
    )
