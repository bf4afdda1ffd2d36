"""
Gap detection over irregular timestamp series and temporal coverage of an expected analysis window.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List

from api.responses import TemporalGap
from engine.enums import GapSeverity, GapType
from engine.models import DateRange
from engine.timing import ceil_days


def expected_days(expected_range: DateRange) -> int:
    return max(1, ceil_days(expected_range.start, expected_range.end))


def _gap(start: datetime, end: datetime, days: int, gap_type: GapType) -> TemporalGap:
    return TemporalGap(
        start_date=start,
        end_date=end,
        duration_days=days,
        type=gap_type,
        severity=GapSeverity.from_days(days),
    )


def find_gaps(
    timestamps: Iterable[datetime],
    expected_range: DateRange,
    gap_type: GapType,
    max_gap_days: int,
) -> List[TemporalGap]:
    ordered = sorted(timestamps)
    if not ordered:
        return [TemporalGap(
            start_date=expected_range.start,
            end_date=expected_range.end,
            duration_days=expected_days(expected_range),
            type=gap_type,
            severity=GapSeverity.severe,
        )]

    # leading edge, consecutive pairs, trailing edge
    spans = []
    if ordered[0] > expected_range.start:
        spans.append((expected_range.start, ordered[0]))
    spans.extend(zip(ordered, ordered[1:]))
    if ordered[-1] < expected_range.end:
        spans.append((ordered[-1], expected_range.end))

    gaps: List[TemporalGap] = []
    for start, end in spans:
        days = ceil_days(start, end)
        if days > max_gap_days:
            gaps.append(_gap(start, end, max(1, days), gap_type))
    return gaps


def coverage_percent(expected_range: DateRange, gaps: Iterable[TemporalGap]) -> float:
    total = expected_days(expected_range)
    gap_days = sum(g.duration_days for g in gaps)
    return min(100.0, max(0.0, ((total - gap_days) / total) * 100.0))
