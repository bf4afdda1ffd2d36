"""
Flag correlation results whose coefficient strength is an outlier among all computed results.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from typing import List, Sequence

import numpy as np

from api.responses import CorrelationResult
from config import settings

log = logging.getLogger(__name__)


def detect_anomalies(
    results: Sequence[CorrelationResult],
    threshold: float | None = None,
) -> List[CorrelationResult]:
    if threshold is None:
        threshold = settings.anomaly_z_threshold
    if len(results) < settings.anomaly_min_results:
        return []

    strengths = np.array([abs(r.correlation_coefficient) for r in results], dtype=float)
    mu, sigma = strengths.mean(), strengths.std()
    if sigma == 0:
        return []

    # unusually strong and unusually weak correlations both count
    z = np.abs((strengths - mu) / sigma)
    anomalies = [r for r, score in zip(results, z) if score > threshold]
    if anomalies:
        log.info("Detected %d anomalous correlations out of %d", len(anomalies), len(results))
    return anomalies
