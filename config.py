"""
Constants and configuration for the Lunar Crime correlation engine.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import os
from typing import Dict, List, Optional, Tuple

from pydantic_settings import BaseSettings


SOURCE_ASTRONOMICAL = "astronomical"
SOURCE_CRIME = "crime"

LUNARCRIME_CRIME_DATA_URL = os.getenv("LUNARCRIME_CRIME_DATA_URL", "").rstrip("/")
LUNARCRIME_REQUEST_TIMEOUT = int(os.getenv("LUNARCRIME_REQUEST_TIMEOUT", "30"))
LUNARCRIME_USER_AGENT = os.getenv("LUNARCRIME_USER_AGENT", "LunarCrimeAnalyzer/1.0")

# canonical order of the lunar cycle, used wherever results are reported per phase
MOON_PHASE_ORDER: List[str] = [
    "new",
    "waxing_crescent",
    "first_quarter",
    "waxing_gibbous",
    "full",
    "waning_gibbous",
    "last_quarter",
    "waning_crescent",
]

# two-sided critical values of the standard normal distribution by confidence level
Z_CRITICAL_VALUES: Dict[float, float] = {
    0.99: 2.576,
    0.98: 2.326,
    0.95: 1.96,
    0.90: 1.645,
    0.80: 1.282,
}

# small-sample p-value buckets for |t|: (threshold, p-value), checked in order
SMALL_SAMPLE_P_VALUES: List[Tuple[float, float]] = [
    (2.576, 0.01),
    (1.96, 0.05),
    (1.645, 0.10),
]
SMALL_SAMPLE_P_FLOOR: float = 0.20

# gap severity buckets: (max duration in days, label)
GAP_SEVERITY_DAYS: List[Tuple[int, str]] = [
    (14, "minor"),
    (30, "moderate"),
]

MS_PER_DAY = 24 * 60 * 60 * 1000
MS_PER_HOUR = 60 * 60 * 1000


class Settings(BaseSettings):
    crime_data_url: Optional[str] = LUNARCRIME_CRIME_DATA_URL or None
    request_timeout: int = LUNARCRIME_REQUEST_TIMEOUT
    user_agent: str = LUNARCRIME_USER_AGENT

    # temporal alignment (exclusive, nearest neighbour)
    alignment_max_time_diff_hours: float = 12.0
    alignment_location_tolerance_deg: float = 1.0
    alignment_accuracy_error: float = 50.0
    alignment_accuracy_warning: float = 80.0
    alignment_max_gap_days: float = 7.0
    alignment_max_avg_diff_hours: float = 6.0
    alignment_default_timezone: str = "UTC"

    # data integrity validation
    integrity_min_coverage_percent: float = 80.0
    integrity_max_gap_days: int = 7
    integrity_min_quality_score: float = 70.0
    integrity_target_quality_score: float = 80.0
    integrity_sparsity_per_day: float = 0.1
    integrity_out_of_range_weight: float = 0.5
    integrity_coverage_deficit_weight: float = 0.3
    integrity_severe_gap_penalty: float = 10.0

    # correlation (non-exclusive nearest phase inside a wider window)
    correlation_match_window_hours: float = 24.0
    correlation_min_days: int = 3
    correlation_large_sample_df: int = 30
    significance_level: float = 0.05
    confidence_level: float = 0.95

    # trends, patterns and anomalies across phases
    trend_anomaly_z: float = 2.0
    pattern_min_points: int = 3
    pattern_trend_threshold: float = 0.7
    pattern_cyclical_threshold: float = 0.6
    pattern_random_confidence: float = 0.5
    anomaly_min_results: int = 3
    anomaly_z_threshold: float = 2.0

    # retry with exponential backoff (seconds)
    retry_max_retries: int = 5
    retry_base_delay: float = 1.0
    retry_max_delay: float = 16.0
    retry_jitter: bool = True
    retry_jitter_ratio: float = 0.25

    # per-source resilience: circuit breaker, rate limiter, cache ttl (seconds)
    astronomical_failure_threshold: int = 3
    astronomical_recovery_timeout: float = 30.0
    astronomical_rate_limit: int = 60
    astronomical_rate_window: float = 60.0
    astronomical_cache_ttl: float = 24 * 60 * 60.0
    astronomical_max_retries: int = 3
    astronomical_max_delay: float = 8.0

    crime_failure_threshold: int = 5
    crime_recovery_timeout: float = 60.0
    crime_rate_limit: int = 100
    crime_rate_window: float = 60.0
    crime_cache_ttl: float = 60 * 60.0
    crime_max_retries: int = 5
    crime_max_delay: float = 16.0

    # date ranges each source can serve, in calendar years relative to today
    astronomical_max_years_back: int = 50
    astronomical_max_years_ahead: int = 10
    crime_max_years_back: int = 20
    crime_max_years_ahead: int = 0

    cache_default_ttl: float = 60 * 60.0

    # jurisdictions kept in the source registry before the least recently used is evicted
    registry_max_jurisdictions: int = 256

    # ephemeris constants
    synodic_month_days: float = 29.53058867
    sidereal_month_days: float = 27.321661
    reference_new_moon_jd: float = 2451549.5
    j2000_jd: float = 2451545.0
    mean_distance_km: float = 384400.0
    orbit_eccentricity: float = 0.0549

    model_config = {
        "env_prefix": "LUNARCRIME_",
        "extra": "ignore",
    }


settings = Settings()
