"""
Validated domain entities shared by the alignment, integrity and correlation engines.

Every record that reaches the engine has passed through these models, so the
statistical code never handles loosely-typed payloads. Naive timestamps are
interpreted as UTC; aware timestamps keep their offset, so an alignment
synchronized into a target timezone is reported in that zone. Comparisons
and differences are instant based either way.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from engine.enums import CrimeCategory, CrimeSeverity, MoonPhaseName


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive values; aware values are returned unchanged."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Entity(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class GeographicCoordinate(Entity):
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    address: Optional[str] = None
    jurisdiction: str = Field(min_length=1)


class CrimeType(Entity):
    category: CrimeCategory
    subcategory: str = Field(min_length=1)
    ucr_code: Optional[str] = None

    @property
    def key(self) -> Tuple[str, str]:
        return (self.category.value, self.subcategory)


class MoonPhaseData(Entity):
    timestamp: datetime
    phase_name: MoonPhaseName
    illumination_percent: float = Field(ge=0.0, le=100.0)
    phase_angle: float = Field(ge=0.0, lt=360.0)
    distance_km: float = Field(gt=0.0)
    location: GeographicCoordinate

    @field_validator("timestamp")
    @classmethod
    def utc_timestamp(cls, value: datetime) -> datetime:
        return as_utc(value)


class CrimeIncident(Entity):
    id: UUID
    timestamp: datetime
    location: GeographicCoordinate
    crime_type: CrimeType
    severity: CrimeSeverity
    description: str = Field(min_length=1)
    case_number: Optional[str] = None
    resolved: bool

    @field_validator("timestamp")
    @classmethod
    def utc_timestamp(cls, value: datetime) -> datetime:
        return as_utc(value)


class DateRange(Entity):
    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def utc_bounds(cls, value: datetime) -> datetime:
        return as_utc(value)

    @model_validator(mode="after")
    def check_order(self) -> DateRange:
        if self.end < self.start:
            raise ValueError("date range end must not precede start")
        return self
