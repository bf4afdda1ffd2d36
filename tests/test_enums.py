"""
Test cases for enums used in the analysis engine, including MoonPhaseName, GapSeverity and the closed crime and pattern vocabularies.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import pytest

from engine.enums import CrimeCategory, GapSeverity, MoonPhaseName, PatternType


def test_moon_phase_order():
    assert [p.value for p in MoonPhaseName.ordered()] == [
        "new",
        "waxing_crescent",
        "first_quarter",
        "waxing_gibbous",
        "full",
        "waning_gibbous",
        "last_quarter",
        "waning_crescent",
    ]


@pytest.mark.parametrize(
    "angle,phase",
    [
        (0.0, MoonPhaseName.new),
        (22.4, MoonPhaseName.new),
        (22.5, MoonPhaseName.waxing_crescent),
        (90.0, MoonPhaseName.first_quarter),
        (180.0, MoonPhaseName.full),
        (270.0, MoonPhaseName.last_quarter),
        (337.5, MoonPhaseName.new),
        (359.9, MoonPhaseName.new),
    ],
)
def test_moon_phase_from_angle(angle, phase):
    assert MoonPhaseName.from_angle(angle) == phase


def test_gap_severity_and_closed_sets():
    assert GapSeverity.from_days(8) == GapSeverity.minor
    assert GapSeverity.from_days(100) == GapSeverity.severe
    assert CrimeCategory("white_collar") == CrimeCategory.white_collar
    with pytest.raises(ValueError):
        CrimeCategory("arson")
    assert PatternType.cyclical.value == "cyclical"
