"""
Per moon phase crime frequency trends and shape classification of the phase-ordered counts.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.trends.patterns import detect_patterns
from engine.trends.phases import analyze_trends, counts_by_phase

__all__ = ["analyze_trends", "counts_by_phase", "detect_patterns"]
