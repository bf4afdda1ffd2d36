"""
Test cases for per-phase trend analysis, pattern classification and correlation anomaly detection.
"""

import pytest

from engine.anomaly import detect_anomalies
from engine.enums import MoonPhaseName, PatternType
from engine.trends import analyze_trends, detect_patterns
from tests.factories import make_crime, make_moon, make_result, make_trends, ts


def test_analyze_trends_flags_outlier_phase():
    phases = MoonPhaseName.ordered()
    moons = [make_moon(ts(2023, 1, 1 + i), phase=p.value) for i, p in enumerate(phases)]
    crimes = []
    for i, phase in enumerate(phases):
        count = 10 if phase == MoonPhaseName.full else 1
        crimes.extend(make_crime(ts(2023, 1, 1 + i, 1)) for _ in range(count))

    trends = analyze_trends(crimes, moons)
    assert [t.moon_phase for t in trends] == phases
    by_phase = {t.moon_phase: t for t in trends}
    assert by_phase[MoonPhaseName.full].crime_count == 10
    assert by_phase[MoonPhaseName.full].is_anomaly
    assert by_phase[MoonPhaseName.full].anomaly_score == pytest.approx(2.646, abs=1e-3)
    assert not by_phase[MoonPhaseName.new].is_anomaly
    assert trends[0].average_count == pytest.approx(17 / 8)


def test_analyze_trends_without_data():
    trends = analyze_trends([], [])
    assert len(trends) == 8
    assert all(t.crime_count == 0 and t.anomaly_score == 0.0 for t in trends)


def test_detect_patterns_insufficient():
    result = detect_patterns(make_trends([1, 2]))
    assert result.pattern == PatternType.random
    assert result.confidence == 0.0


def test_detect_patterns_increasing_and_decreasing():
    inc = detect_patterns(make_trends([1, 2, 3, 4, 5, 6, 7, 8]))
    assert inc.pattern == PatternType.increasing
    assert inc.confidence == 1.0
    assert inc.description == "Crime rates show an increasing trend across lunar phases (confidence: 100.0%)"

    dec = detect_patterns(make_trends([8, 7, 6, 5, 4, 3, 2, 1]))
    assert dec.pattern == PatternType.decreasing


def test_detect_patterns_cyclical():
    result = detect_patterns(make_trends([1, 3, 1, 3, 1, 3, 1, 3]))
    assert result.pattern == PatternType.cyclical
    assert result.confidence == 1.0


def test_detect_patterns_random_default():
    result = detect_patterns(make_trends([2] * 8))
    assert result.pattern == PatternType.random
    assert result.confidence == 0.5


def test_detect_anomalies():
    results = [make_result(0.1) for _ in range(9)] + [make_result(0.9, phase="new")]
    anomalies = detect_anomalies(results)
    assert len(anomalies) == 1
    assert anomalies[0].moon_phase == MoonPhaseName.new


def test_detect_anomalies_needs_three_results():
    assert detect_anomalies([make_result(0.1), make_result(0.9)]) == []


def test_detect_anomalies_uses_absolute_strength():
    results = [make_result(0.1) for _ in range(9)] + [make_result(-0.9)]
    assert len(detect_anomalies(results)) == 1
    assert detect_anomalies(results, threshold=5.0) == []


def test_detect_anomalies_flags_unusually_weak_correlation():
    results = [make_result(0.9) for _ in range(9)] + [make_result(0.0, phase="new")]
    anomalies = detect_anomalies(results)
    assert len(anomalies) == 1
    assert anomalies[0].moon_phase == MoonPhaseName.new
    assert anomalies[0].correlation_coefficient == 0.0
