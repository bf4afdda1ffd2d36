"""
Pearson correlation, t-test significance and Fisher z confidence intervals for correlation coefficients.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np
from scipy.stats import norm

from config import SMALL_SAMPLE_P_FLOOR, SMALL_SAMPLE_P_VALUES, Z_CRITICAL_VALUES, settings


def pearson(xs: Sequence[float], ys: Sequence[float]) -> float:
    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)
    if x.size != y.size:
        raise ValueError(f"series length mismatch: {x.size} != {y.size}")
    if x.size < 2:
        raise ValueError("at least two observations are required")

    dx = x - x.mean()
    dy = y - y.mean()
    denom = math.sqrt(float(np.sum(dx * dx)) * float(np.sum(dy * dy)))
    if denom == 0.0:
        raise ValueError("correlation undefined for a constant series")
    r = float(np.sum(dx * dy)) / denom
    if not math.isfinite(r):
        raise ValueError(f"non-finite correlation coefficient: {r}")
    return max(-1.0, min(1.0, r))


def t_statistic(r: float, n: int) -> float:
    df = n - 2
    denom = 1.0 - r * r
    if denom <= 0.0:
        return math.copysign(math.inf, r)
    return r * math.sqrt(df / denom)


def p_value(t: float, df: int) -> float:
    if df > settings.correlation_large_sample_df:
        return float(min(1.0, max(0.0, 2.0 * norm.sf(abs(t)))))

    # conservative buckets for small samples
    abs_t = abs(t)
    for threshold, p in SMALL_SAMPLE_P_VALUES:
        if abs_t > threshold:
            return p
    return SMALL_SAMPLE_P_FLOOR


def z_critical(confidence_level: float) -> float:
    key = round(confidence_level, 2)
    if key in Z_CRITICAL_VALUES:
        return Z_CRITICAL_VALUES[key]
    return float(norm.ppf(1.0 - (1.0 - confidence_level) / 2.0))


def confidence_interval(r: float, n: int, confidence_level: float | None = None) -> Tuple[float, float]:
    if confidence_level is None:
        confidence_level = settings.confidence_level
    if abs(r) >= 1.0 or n < 4:
        return (-1.0, 1.0)

    z = math.atanh(r)
    se = 1.0 / math.sqrt(n - 3)
    crit = z_critical(confidence_level)
    lower = math.tanh(z - crit * se)
    upper = math.tanh(z + crit * se)
    return (max(-1.0, lower), min(1.0, upper))


def significance(r: float, n: int, confidence_level: float | None = None) -> Tuple[float, Tuple[float, float]]:
    return p_value(t_statistic(r, n), n - 2), confidence_interval(r, n, confidence_level)
