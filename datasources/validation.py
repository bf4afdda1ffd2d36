"""
Validation boundary for upstream payloads.

Raw records are validated one at a time so a single malformed record is
dropped and logged instead of failing the whole batch.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, TypeVar

from pydantic import TypeAdapter, ValidationError

from datasources.exceptions import DataRangeUnavailable
from engine.models import CrimeIncident, CrimeType, DateRange, GeographicCoordinate, MoonPhaseData

log = logging.getLogger(__name__)

M = TypeVar("M")

_crime_adapter = TypeAdapter(CrimeIncident)
_moon_adapter = TypeAdapter(MoonPhaseData)


def extract_records(payload: Any) -> List[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping):
        for key in ("data", "incidents", "results", "items"):
            records = payload.get(key)
            if isinstance(records, list):
                return records
    raise ValueError(f"unsupported payload shape: {type(payload).__name__}")


def _parse(records: Iterable[Any], adapter: TypeAdapter, label: str) -> List[Any]:
    parsed: List[Any] = []
    dropped = 0
    for index, record in enumerate(records):
        try:
            parsed.append(adapter.validate_python(record))
        except ValidationError as exc:
            dropped += 1
            log.warning("Dropping invalid %s record %d: %d validation errors", label, index, exc.error_count())
    if dropped:
        log.info("Validated %d %s records, dropped %d", len(parsed), label, dropped)
    return parsed


def _identity(incident: CrimeIncident) -> Tuple[Any, ...]:
    if incident.case_number:
        return ("case", incident.case_number)
    return (
        "event",
        incident.timestamp,
        incident.location.latitude,
        incident.location.longitude,
        incident.crime_type.key,
    )


def deduplicate(incidents: Iterable[CrimeIncident]) -> List[CrimeIncident]:
    seen: Set[Tuple[Any, ...]] = set()
    unique: List[CrimeIncident] = []
    for incident in incidents:
        identity = _identity(incident)
        if identity in seen:
            continue
        seen.add(identity)
        unique.append(incident)
    return unique


def parse_crime_incidents(records: Iterable[Any]) -> List[CrimeIncident]:
    return deduplicate(_parse(records, _crime_adapter, "crime incident"))


def parse_moon_phases(records: Iterable[Any]) -> List[MoonPhaseData]:
    return _parse(records, _moon_adapter, "moon phase")


def matches_crime_types(incident: CrimeIncident, crime_types: Sequence[CrimeType]) -> bool:
    """True when the incident's category matches a requested type and its subcategory contains that type's subcategory."""
    category = incident.crime_type.category
    subcategory = incident.crime_type.subcategory.lower()
    return any(
        ct.category == category and ct.subcategory.lower() in subcategory
        for ct in crime_types
    )


def filter_crime_types(
    incidents: Iterable[CrimeIncident],
    crime_types: Optional[Sequence[CrimeType]],
) -> List[CrimeIncident]:
    if not crime_types:
        return list(incidents)
    return [i for i in incidents if matches_crime_types(i, crime_types)]


def available_window(years_back: int, years_ahead: int, today: Optional[date] = None) -> Tuple[date, date]:
    today = today or datetime.now(timezone.utc).date()
    return date(today.year - years_back, 1, 1), date(today.year + years_ahead, 12, 31)


def check_availability(
    location: GeographicCoordinate,
    date_range: DateRange,
    years_back: int,
    years_ahead: int,
    label: str,
    today: Optional[date] = None,
) -> None:
    if not (math.isfinite(location.latitude) and math.isfinite(location.longitude)):
        raise DataRangeUnavailable(f"{label} data needs finite coordinates")
    earliest, latest = available_window(years_back, years_ahead, today)
    start = date_range.start.astimezone(timezone.utc).date()
    end = date_range.end.astimezone(timezone.utc).date()
    if start < earliest or end > latest:
        raise DataRangeUnavailable(
            f"{label} data is available from {earliest.isoformat()} to {latest.isoformat()}, "
            f"requested {start.isoformat()} to {end.isoformat()}"
        )
