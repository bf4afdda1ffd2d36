"""
Correlation between lunar illumination and crime frequency, with t-test significance and Fisher z confidence intervals, to quantify whether crime rates move with the lunar cycle.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.correlation.lunar import correlate, daily_series, group_by_crime_type, summarize
from engine.correlation.nearest import nearest_moon_phase, pair_with_moon_phases
from engine.correlation.significance import confidence_interval, p_value, pearson, significance

__all__ = [
    "correlate",
    "summarize",
    "daily_series",
    "group_by_crime_type",
    "nearest_moon_phase",
    "pair_with_moon_phases",
    "pearson",
    "p_value",
    "confidence_interval",
    "significance",
]
