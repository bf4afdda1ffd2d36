"""
Timestamp arithmetic helpers shared by the alignment, integrity and correlation engines.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import math
from datetime import date, datetime, timezone

from config import MS_PER_DAY


def elapsed_ms(a: datetime, b: datetime) -> float:
    return abs((a - b).total_seconds()) * 1000.0


def ceil_days(start: datetime, end: datetime) -> int:
    """Whole days spanned from ``start`` to ``end``, rounded up."""
    return math.ceil(((end - start).total_seconds() * 1000.0) / MS_PER_DAY)


def utc_day(ts: datetime) -> date:
    return ts.astimezone(timezone.utc).date()
