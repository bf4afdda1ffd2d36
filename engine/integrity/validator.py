"""
Data integrity validation between the astronomical and crime datasets.

The validator classifies incidents against the moon phase coverage window,
detects temporal gaps in both series, scores overall data quality and turns
the findings into a report with recommendations.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from api.responses import (
    CoverageCheck,
    DataIntegrityReport,
    DataQualityIssue,
    DataQualityMetrics,
    RangeClassification,
)
from config import settings
from engine.enums import GapSeverity, GapType, IssueSeverity, IssueType
from engine.integrity.coverage import coverage_percent, expected_days, find_gaps
from engine.models import CrimeIncident, DateRange, MoonPhaseData

log = logging.getLogger(__name__)


class DataIntegrityValidator:
    def __init__(
        self,
        min_coverage_percent: Optional[float] = None,
        max_gap_days: Optional[int] = None,
    ) -> None:
        if min_coverage_percent is None:
            min_coverage_percent = settings.integrity_min_coverage_percent
        if max_gap_days is None:
            max_gap_days = settings.integrity_max_gap_days
        self.min_coverage_percent = min_coverage_percent
        self.max_gap_days = max_gap_days

    def classify_in_range(
        self,
        crimes: Sequence[CrimeIncident],
        moon_phases: Sequence[MoonPhaseData],
    ) -> RangeClassification:
        if not moon_phases:
            return RangeClassification(in_range=[], out_of_range=list(crimes), moon_phase_range=None)

        stamps = [m.timestamp for m in moon_phases]
        window = DateRange(start=min(stamps), end=max(stamps))
        in_range: List[CrimeIncident] = []
        out_of_range: List[CrimeIncident] = []
        for crime in crimes:
            if window.start <= crime.timestamp <= window.end:
                in_range.append(crime)
            else:
                out_of_range.append(crime)
        return RangeClassification(in_range=in_range, out_of_range=out_of_range, moon_phase_range=window)

    def check_coverage(
        self,
        crimes: Sequence[CrimeIncident],
        moon_phases: Sequence[MoonPhaseData],
        expected_range: DateRange,
    ) -> CoverageCheck:
        gaps = find_gaps((c.timestamp for c in crimes), expected_range, GapType.crime_data, self.max_gap_days)
        gaps += find_gaps((m.timestamp for m in moon_phases), expected_range, GapType.moon_data, self.max_gap_days)
        percent = coverage_percent(expected_range, gaps)
        return CoverageCheck(
            coverage_percent=percent,
            gaps=gaps,
            has_sufficient_coverage=percent >= self.min_coverage_percent,
        )

    def quality_metrics(
        self,
        crimes: Sequence[CrimeIncident],
        moon_phases: Sequence[MoonPhaseData],
        expected_range: DateRange,
    ) -> DataQualityMetrics:
        ranges = self.classify_in_range(crimes, moon_phases)
        coverage = self.check_coverage(crimes, moon_phases, expected_range)
        severe = [g for g in coverage.gaps if g.severity == GapSeverity.severe]
        out_count = len(ranges.out_of_range)

        issues: List[DataQualityIssue] = []
        if out_count:
            issues.append(DataQualityIssue(
                type=IssueType.out_of_range,
                severity=IssueSeverity.error,
                message=f"{out_count} crime incidents fall outside moon phase date range",
                affected_records=out_count,
                date_range=ranges.moon_phase_range,
            ))
        if not coverage.has_sufficient_coverage:
            issues.append(DataQualityIssue(
                type=IssueType.insufficient_coverage,
                severity=IssueSeverity.warning,
                message=(
                    f"Temporal coverage is {coverage.coverage_percent:.1f}% "
                    f"(minimum required: {self.min_coverage_percent:g}%)"
                ),
                date_range=expected_range,
            ))
        if severe:
            issues.append(DataQualityIssue(
                type=IssueType.temporal_gap,
                severity=IssueSeverity.error,
                message=f"{len(severe)} severe temporal gaps detected",
                affected_records=len(severe),
            ))
        per_day = len(crimes) / expected_days(expected_range)
        if per_day < settings.integrity_sparsity_per_day:
            issues.append(DataQualityIssue(
                type=IssueType.data_sparsity,
                severity=IssueSeverity.warning,
                message=f"Low crime incident density: {per_day:.3f} incidents per day",
                date_range=expected_range,
            ))

        out_percent = (out_count / len(crimes)) * 100.0 if crimes else 0.0
        deficit = max(0.0, self.min_coverage_percent - coverage.coverage_percent)
        score = 100.0
        score -= out_percent * settings.integrity_out_of_range_weight
        score -= deficit * settings.integrity_coverage_deficit_weight
        score -= len(severe) * settings.integrity_severe_gap_penalty

        return DataQualityMetrics(
            total_crime_incidents=len(crimes),
            total_moon_phases=len(moon_phases),
            crime_incidents_in_range=len(ranges.in_range),
            crime_incidents_out_of_range=out_count,
            temporal_coverage_percent=coverage.coverage_percent,
            data_gaps=coverage.gaps,
            quality_score=min(100.0, max(0.0, score)),
            issues=issues,
        )

    def integrity_report(
        self,
        crimes: Sequence[CrimeIncident],
        moon_phases: Sequence[MoonPhaseData],
        expected_range: DateRange,
    ) -> DataIntegrityReport:
        metrics = self.quality_metrics(crimes, moon_phases, expected_range)
        has_errors = any(i.severity == IssueSeverity.error for i in metrics.issues)
        is_valid = not has_errors and metrics.quality_score >= settings.integrity_min_quality_score

        if not is_valid:
            log.info(
                "Data integrity check failed: score=%.1f issues=%s",
                metrics.quality_score,
                [i.type.value for i in metrics.issues],
            )
        return DataIntegrityReport(
            is_valid=is_valid,
            quality_metrics=metrics,
            recommendations=self._recommendations(metrics),
            validation_timestamp=datetime.now(timezone.utc),
        )

    def _recommendations(self, metrics: DataQualityMetrics) -> List[str]:
        present = {i.type for i in metrics.issues}
        severe = sum(1 for g in metrics.data_gaps if g.severity == GapSeverity.severe)
        recommendations: List[str] = []

        if IssueType.out_of_range in present:
            recommendations.append(
                f"Remove or adjust {metrics.crime_incidents_out_of_range} crime incidents "
                "that fall outside the moon phase date range."
            )
        if IssueType.insufficient_coverage in present:
            recommendations.append(
                f"Improve temporal coverage from {metrics.temporal_coverage_percent:.1f}% "
                f"to at least {self.min_coverage_percent:g}%."
            )
        if IssueType.temporal_gap in present:
            recommendations.append(
                f"Address {severe} severe temporal gaps by obtaining additional data "
                "or adjusting the analysis period."
            )
        if IssueType.data_sparsity in present:
            recommendations.append(
                "Widen the analysis period or jurisdiction to collect more crime incidents per day."
            )
        if metrics.quality_score < settings.integrity_target_quality_score:
            recommendations.append(
                f"Improve overall data quality score from {metrics.quality_score:.1f} "
                f"to at least {settings.integrity_target_quality_score:g}."
            )

        if not recommendations:
            recommendations.append("Data integrity is satisfactory. No immediate actions required.")
        return recommendations
