from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from engine.models import CrimeIncident, CrimeType, DateRange, GeographicCoordinate, MoonPhaseData, as_utc


class AnalysisRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    location: GeographicCoordinate
    start: datetime
    end: datetime
    crimes: Optional[List[CrimeIncident]] = None
    moon_phases: Optional[List[MoonPhaseData]] = None
    max_time_diff_hours: Optional[float] = Field(default=None, gt=0.0, le=24.0 * 30)
    target_timezone: Optional[str] = None
    crime_types: Optional[List[CrimeType]] = None

    @field_validator("start", "end")
    @classmethod
    def utc_bounds(cls, value: datetime) -> datetime:
        return as_utc(value)

    @model_validator(mode="after")
    def check_order(self) -> AnalysisRequest:
        if self.end < self.start:
            raise ValueError("end must not precede start")
        return self

    @property
    def date_range(self) -> DateRange:
        return DateRange(start=self.start, end=self.end)

    @property
    def max_time_diff(self) -> Optional[timedelta]:
        if self.max_time_diff_hours is None:
            return None
        return timedelta(hours=self.max_time_diff_hours)
