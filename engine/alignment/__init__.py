"""
Exclusive nearest-neighbour alignment of crime incidents with moon phase observations, plus integrity checks and summary statistics over the resulting pairs.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.alignment.aligner import (
    TimestampAligner,
    align,
    locations_compatible,
    statistics,
    synchronize_timestamps,
    validate_integrity,
)

__all__ = [
    "TimestampAligner",
    "align",
    "locations_compatible",
    "statistics",
    "synchronize_timestamps",
    "validate_integrity",
]
