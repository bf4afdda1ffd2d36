"""
Classify the phase-ordered crime counts as increasing, decreasing, cyclical or random.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import List, Sequence

from api.responses import PatternDetectionResult, TrendAnalysisResult
from config import settings
from engine.enums import PatternType


def _pair_ratio(counts: List[int], rising: bool) -> float:
    steps = list(zip(counts, counts[1:]))
    if not steps:
        return 0.0
    hits = sum(1 for a, b in steps if (b > a if rising else b < a))
    return hits / len(steps)


def _cyclical_confidence(counts: List[int]) -> float:
    if len(counts) < 4:
        return 0.0
    extrema = 0
    for prev, cur, nxt in zip(counts, counts[1:], counts[2:]):
        if (cur > prev and cur > nxt) or (cur < prev and cur < nxt):
            extrema += 1
    if extrema < 2:
        return 0.0
    return min(extrema / (len(counts) // 2), 1.0)


def _describe(kind: str, confidence: float) -> str:
    return f"Crime rates show {kind} across lunar phases (confidence: {confidence * 100:.1f}%)"


def detect_patterns(trends: Sequence[TrendAnalysisResult]) -> PatternDetectionResult:
    counts = [t.crime_count for t in trends]
    if len(counts) < settings.pattern_min_points:
        return PatternDetectionResult(
            pattern=PatternType.random,
            confidence=0.0,
            description="Insufficient data for pattern detection",
        )

    threshold = settings.pattern_trend_threshold
    increasing = _pair_ratio(counts, rising=True)
    if increasing > threshold:
        return PatternDetectionResult(
            pattern=PatternType.increasing,
            confidence=increasing,
            description=_describe("an increasing trend", increasing),
        )

    decreasing = _pair_ratio(counts, rising=False)
    if decreasing > threshold:
        return PatternDetectionResult(
            pattern=PatternType.decreasing,
            confidence=decreasing,
            description=_describe("a decreasing trend", decreasing),
        )

    cyclical = _cyclical_confidence(counts)
    if cyclical > settings.pattern_cyclical_threshold:
        return PatternDetectionResult(
            pattern=PatternType.cyclical,
            confidence=cyclical,
            description=_describe("a cyclical pattern", cyclical),
        )

    return PatternDetectionResult(
        pattern=PatternType.random,
        confidence=settings.pattern_random_confidence,
        description="No clear pattern detected in crime rates across lunar phases",
    )
