"""
Randomized tests for the alignment, integrity and correlation engines. Each seed generates crimes, moon phases and date ranges and checks the properties that must hold for every input: alignment totals and exclusivity, time and location bounds, range classification, correlation result bounds and quality score bounds.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import random
from datetime import timedelta

import pytest

from config import settings
from engine import alignment
from engine.anomaly import detect_anomalies
from engine.correlation import correlate, summarize
from engine.enums import MoonPhaseName
from engine.integrity import DataIntegrityValidator
from engine.models import DateRange, GeographicCoordinate
from tests.factories import NYC, make_crime, make_moon, ts

BASE = ts(2023, 1, 1)
CRIME_TYPES = [("violent", "assault"), ("violent", "robbery"), ("property", "theft"), ("drug", "possession")]


def random_location(spread=1.5):
    return GeographicCoordinate(
        latitude=NYC.latitude + random.uniform(-spread, spread),
        longitude=NYC.longitude + random.uniform(-spread, spread),
        jurisdiction="NYC",
    )


def random_crimes(count, span_hours, spread=1.5):
    crimes = []
    for _ in range(count):
        category, subcategory = random.choice(CRIME_TYPES)
        crimes.append(make_crime(
            BASE + timedelta(minutes=random.randint(0, span_hours * 60)),
            category,
            subcategory,
            location=random_location(spread),
        ))
    return crimes


def random_moons(count, span_hours, spread=0.5):
    hours = random.sample(range(span_hours), min(count, span_hours))
    return [
        make_moon(
            BASE + timedelta(hours=h),
            phase=random.choice(MoonPhaseName.ordered()).value,
            illumination=random.uniform(0.0, 100.0),
            angle=random.uniform(0.0, 359.9),
            location=random_location(spread),
        )
        for h in hours
    ]


def random_range(span_hours):
    start = BASE + timedelta(hours=random.randint(-48, 48))
    return DateRange(start=start, end=start + timedelta(hours=random.randint(1, span_hours)))


@pytest.mark.parametrize("seed", range(10))
def test_fuzzy_alignment_properties(seed):
    random.seed(seed)
    span = random.randint(24, 24 * 30)
    crimes = random_crimes(random.randint(0, 60), span)
    moons = random_moons(random.randint(0, 40), span)
    max_diff = timedelta(hours=random.choice([1, 6, 12, 24, 48]))

    result = alignment.align(crimes, moons, max_diff)

    assert result.total_crimes == len(crimes)
    assert result.total_moon_phases == len(moons)
    assert len(result.alignments) + len(result.unaligned_crimes) == len(crimes)
    assert len(result.alignments) + len(result.unaligned_moon_phases) == len(moons)

    crime_ids = [a.crime_incident.id for a in result.alignments]
    moon_stamps = [a.moon_phase.timestamp for a in result.alignments]
    assert len(set(crime_ids)) == len(crime_ids)
    assert len(set(moon_stamps)) == len(moon_stamps)
    assert not set(crime_ids) & {c.id for c in result.unaligned_crimes}

    tolerance = settings.alignment_location_tolerance_deg
    for a in result.alignments:
        delta = abs(a.crime_incident.timestamp - a.moon_phase.timestamp)
        assert a.time_difference_ms == pytest.approx(delta.total_seconds() * 1000.0)
        assert a.time_difference_ms <= max_diff.total_seconds() * 1000.0
        assert abs(a.crime_incident.location.latitude - a.moon_phase.location.latitude) <= tolerance
        assert abs(a.crime_incident.location.longitude - a.moon_phase.location.longitude) <= tolerance

    stats = alignment.statistics(result)
    assert stats.total_alignments == len(result.alignments)
    if result.alignments:
        assert stats.min_time_difference_ms <= stats.average_time_difference_ms <= stats.max_time_difference_ms
    assert 0.0 <= result.alignment_accuracy <= 100.0


@pytest.mark.parametrize("seed", range(10))
def test_fuzzy_range_classification(seed):
    random.seed(seed)
    span = random.randint(24, 24 * 60)
    crimes = random_crimes(random.randint(0, 50), span + 24 * 10)
    moons = random_moons(random.randint(0, 20), span)

    ranges = DataIntegrityValidator().classify_in_range(crimes, moons)

    assert len(ranges.in_range) + len(ranges.out_of_range) == len(crimes)
    if not moons:
        assert ranges.moon_phase_range is None
        assert len(ranges.out_of_range) == len(crimes)
        return

    first = min(m.timestamp for m in moons)
    last = max(m.timestamp for m in moons)
    assert ranges.moon_phase_range.start == first
    assert ranges.moon_phase_range.end == last
    for crime in ranges.in_range:
        assert first <= crime.timestamp <= last
    for crime in ranges.out_of_range:
        assert crime.timestamp < first or crime.timestamp > last


@pytest.mark.parametrize("seed", range(10))
def test_fuzzy_integrity_report_bounds_and_idempotence(seed):
    random.seed(seed)
    span = random.randint(24, 24 * 45)
    crimes = random_crimes(random.randint(0, 80), span)
    moons = random_moons(random.randint(0, 45), span)
    expected = random_range(span)
    validator = DataIntegrityValidator(min_coverage_percent=random.choice([50.0, 80.0, 95.0]))

    coverage = validator.check_coverage(crimes, moons, expected)
    assert 0.0 <= coverage.coverage_percent <= 100.0
    assert coverage.has_sufficient_coverage == (coverage.coverage_percent >= validator.min_coverage_percent)

    first = validator.integrity_report(crimes, moons, expected)
    second = validator.integrity_report(crimes, moons, expected)
    metrics = first.quality_metrics
    assert 0.0 <= metrics.quality_score <= 100.0
    assert 0.0 <= metrics.temporal_coverage_percent <= 100.0
    assert metrics.crime_incidents_in_range + metrics.crime_incidents_out_of_range == len(crimes)
    assert first.recommendations
    assert metrics.model_dump() == second.quality_metrics.model_dump()
    assert first.is_valid == second.is_valid


@pytest.mark.parametrize("seed", range(10))
def test_fuzzy_correlation_bounds(seed):
    random.seed(seed)
    days = random.randint(3, 40)
    moons = [
        make_moon(
            BASE + timedelta(days=d, hours=random.randint(0, 23)),
            phase=random.choice(MoonPhaseName.ordered()).value,
            illumination=random.uniform(0.0, 100.0),
        )
        for d in range(days)
    ]
    crimes = [
        make_crime(BASE + timedelta(days=d, hours=random.randint(0, 23)), *random.choice(CRIME_TYPES))
        for d in range(days)
        for _ in range(random.randint(0, 6))
    ]

    results = correlate(crimes, moons)
    for r in results:
        assert -1.0 <= r.correlation_coefficient <= 1.0
        assert 0.0 <= r.p_value <= 1.0
        lo, hi = r.confidence_interval
        assert -1.0 <= lo <= hi <= 1.0
        assert r.sample_size >= 1

    window = DateRange(start=BASE, end=BASE + timedelta(days=days))
    summary = summarize(results, crimes, NYC, window)
    assert summary.total_crime_incidents == len(crimes)
    assert 0.0 <= summary.overall_significance <= 1.0

    anomalies = detect_anomalies(results)
    assert all(a in results for a in anomalies)
