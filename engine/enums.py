"""
Enumerations for Moon Phases, Crime Categories, Data Quality and Pattern Types

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from enum import Enum

from config import GAP_SEVERITY_DAYS, MOON_PHASE_ORDER


class MoonPhaseName(str, Enum):
    new = "new"
    waxing_crescent = "waxing_crescent"
    first_quarter = "first_quarter"
    waxing_gibbous = "waxing_gibbous"
    full = "full"
    waning_gibbous = "waning_gibbous"
    last_quarter = "last_quarter"
    waning_crescent = "waning_crescent"

    @classmethod
    def ordered(cls) -> list[MoonPhaseName]:
        return [cls(name) for name in MOON_PHASE_ORDER]

    @classmethod
    def from_angle(cls, phase_angle: float) -> MoonPhaseName:
        # eight 45 degree sectors centred on new (0), first quarter (90), full (180) ...
        index = int(((phase_angle % 360.0) + 22.5) // 45.0) % 8
        return cls.ordered()[index]


class CrimeCategory(str, Enum):
    violent = "violent"
    property = "property"
    drug = "drug"
    public_order = "public_order"
    white_collar = "white_collar"


class CrimeSeverity(str, Enum):
    misdemeanor = "misdemeanor"
    felony = "felony"
    violation = "violation"


class GapType(str, Enum):
    crime_data = "crime_data"
    moon_data = "moon_data"
    both = "both"


class GapSeverity(str, Enum):
    minor = "minor"
    moderate = "moderate"
    severe = "severe"

    @classmethod
    def from_days(cls, days: int) -> GapSeverity:
        for limit, label in GAP_SEVERITY_DAYS:
            if days <= limit:
                return cls(label)
        return cls.severe


class IssueType(str, Enum):
    out_of_range = "out_of_range"
    temporal_gap = "temporal_gap"
    insufficient_coverage = "insufficient_coverage"
    data_sparsity = "data_sparsity"


class IssueSeverity(str, Enum):
    warning = "warning"
    error = "error"


class PatternType(str, Enum):
    increasing = "increasing"
    decreasing = "decreasing"
    cyclical = "cyclical"
    random = "random"
