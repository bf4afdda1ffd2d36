"""
Data integrity validation: coverage window classification, temporal gap detection, quality scoring and integrity reports.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.integrity.coverage import coverage_percent, expected_days, find_gaps
from engine.integrity.validator import DataIntegrityValidator

__all__ = ["DataIntegrityValidator", "coverage_percent", "expected_days", "find_gaps"]
