"""
Route-level tests for the analysis and health endpoints, including upstream error translation and camelCase wire format.
"""

from __future__ import annotations

import uuid

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from api.requests import AnalysisRequest
from api.routes import analysis as analysis_route
from api.routes import health as health_route
from datasources.exceptions import CircuitOpenError, RateLimitExceededError, RetryExhaustedError
from datasources.registry import SourceRegistry
from engine.enums import MoonPhaseName
from services import analysis_service
from tests.factories import NYC, make_crime, make_moon, ts


def _request(**overrides) -> AnalysisRequest:
    moons = [make_moon(ts(2023, 1, d, 12), illumination=80.0 + d) for d in range(1, 6)]
    crimes = [
        make_crime(ts(2023, 1, d, 13))
        for d in range(1, 6)
        for _ in range(d)
    ]
    fields = dict(
        location=NYC,
        start=ts(2023, 1, 1),
        end=ts(2023, 1, 5, 23),
        crimes=crimes,
        moon_phases=moons,
    )
    fields.update(overrides)
    return AnalysisRequest(**fields)


@pytest.mark.asyncio
async def test_correlations_route_with_inline_data():
    results = await analysis_route.correlations(_request(), registry=SourceRegistry())
    assert len(results) == 1
    assert results[0].moon_phase == MoonPhaseName.full
    assert results[0].correlation_coefficient == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_statistics_route_builds_full_report():
    report = await analysis_route.statistics(_request(), registry=SourceRegistry())
    assert report.summary.total_crime_incidents == 15
    assert len(report.trends) == 8
    assert report.pattern.pattern is not None
    assert report.anomalies == []


@pytest.mark.asyncio
async def test_statistics_route_computes_missing_moon_phases():
    registry = SourceRegistry()
    report = await analysis_route.statistics(_request(moon_phases=None), registry=registry)
    assert report.summary.total_crime_incidents == 15
    assert len(registry.get("NYC").astronomical.source.cache) == 1


@pytest.mark.asyncio
async def test_alignment_route_reports_integrity_and_statistics():
    report = await analysis_route.alignment(_request(), registry=SourceRegistry())
    assert report.result.total_crimes == 15
    assert len(report.result.alignments) == 5
    assert report.statistics.total_alignments == 5
    assert not report.integrity.is_valid


@pytest.mark.asyncio
async def test_alignment_route_unknown_timezone_is_bad_request():
    with pytest.raises(HTTPException) as info:
        await analysis_route.alignment(_request(target_timezone="Nowhere/Zone"), registry=SourceRegistry())
    assert info.value.status_code == 400


@pytest.mark.asyncio
async def test_integrity_route():
    report = await analysis_route.integrity(_request(), registry=SourceRegistry())
    assert report.recommendations
    assert report.quality_metrics.total_crime_incidents == 15


@pytest.mark.asyncio
async def test_moon_phases_route():
    phases = await analysis_route.moon_phases(
        latitude=40.7,
        longitude=-74.0,
        jurisdiction="NYC",
        start=ts(2023, 1, 1),
        end=ts(2023, 1, 7),
        address=None,
        registry=SourceRegistry(),
    )
    assert len(phases) == 7


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error,status",
    [
        (RateLimitExceededError(12.3), 429),
        (CircuitOpenError(), 503),
        (RetryExhaustedError(6, ConnectionError("network down")), 502),
    ],
)
async def test_upstream_errors_are_translated(monkeypatch, error, status):
    async def failing(registry, req):
        raise error

    monkeypatch.setattr(analysis_service, "run_correlations", failing)
    with pytest.raises(HTTPException) as info:
        await analysis_route.correlations(_request(), registry=SourceRegistry())
    assert info.value.status_code == status
    if status == 429:
        assert info.value.headers["Retry-After"] == "13"


@pytest.mark.asyncio
async def test_health_route_reports_sources():
    registry = SourceRegistry()
    registry.get("NYC")
    status = await health_route.health(registry=registry)
    assert status.status == "ok"
    assert status.sources["NYC"]["crime"].state == "CLOSED"


def test_request_rejects_inverted_range():
    with pytest.raises(ValueError):
        _request(start=ts(2023, 2, 1), end=ts(2023, 1, 1))


def test_alignment_endpoint_speaks_camel_case():
    import main

    payload = {
        "location": {"latitude": 40.7, "longitude": -74.0, "jurisdiction": "NYC"},
        "start": "2023-01-01T00:00:00Z",
        "end": "2023-01-02T00:00:00Z",
        "crimes": [
            {
                "id": str(uuid.uuid4()),
                "timestamp": "2023-01-01T02:00:00Z",
                "location": {"latitude": 40.7, "longitude": -74.0, "jurisdiction": "NYC"},
                "crimeType": {"category": "violent", "subcategory": "assault"},
                "severity": "felony",
                "description": "Assault",
                "resolved": False,
            }
        ],
        "maxTimeDiffHours": 6,
    }
    with TestClient(main.app) as client:
        resp = client.post("/api/v1/alignment", json=payload)
        assert resp.status_code == 200
        body = resp.json()
        assert body["result"]["alignmentAccuracy"] == 100.0
        assert body["result"]["alignments"][0]["timeDifferenceMs"] == 2 * 60 * 60 * 1000
        assert body["statistics"]["totalAlignments"] == 1

        bad = client.post("/api/v1/alignment", json={**payload, "end": "2022-12-01T00:00:00Z"})
        assert bad.status_code == 422

        health = client.get("/api/v1/health")
        assert health.status_code == 200
        assert health.json()["sources"]["NYC"]["astronomical"]["rateLimitRemaining"] == 59


@pytest.mark.asyncio
async def test_moon_phases_route_rejects_unbounded_range():
    with pytest.raises(HTTPException) as info:
        await analysis_route.moon_phases(
            latitude=40.7,
            longitude=-74.0,
            jurisdiction="NYC",
            start=ts(1, 1, 1),
            end=ts(9999, 12, 31),
            address=None,
            registry=SourceRegistry(),
        )
    assert info.value.status_code == 400
    assert "Moon phase data is available" in info.value.detail


@pytest.mark.asyncio
async def test_crime_data_route_without_feed_returns_empty():
    crimes = await analysis_route.crime_data(
        latitude=40.7,
        longitude=-74.0,
        jurisdiction="NYC",
        start=ts(2023, 1, 1),
        end=ts(2023, 1, 7),
        crime_type=["violent:assault"],
        address=None,
        registry=SourceRegistry(crime_url=""),
    )
    assert crimes == []


@pytest.mark.asyncio
async def test_crime_data_route_rejects_malformed_crime_type():
    with pytest.raises(HTTPException) as info:
        await analysis_route.crime_data(
            latitude=40.7,
            longitude=-74.0,
            jurisdiction="NYC",
            start=ts(2023, 1, 1),
            end=ts(2023, 1, 7),
            crime_type=["assault"],
            address=None,
            registry=SourceRegistry(crime_url=""),
        )
    assert info.value.status_code == 400


@pytest.mark.asyncio
async def test_inline_crimes_are_filtered_by_crime_type():
    crimes = [make_crime(ts(2023, 1, d, 13)) for d in range(1, 6)]
    crimes += [make_crime(ts(2023, 1, d, 14), "property", "theft") for d in range(1, 6)]
    req = _request(crimes=crimes, crime_types=[{"category": "property", "subcategory": "theft"}])
    report = await analysis_route.integrity(req, registry=SourceRegistry())
    assert report.quality_metrics.total_crime_incidents == 5
