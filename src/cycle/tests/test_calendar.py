"""Tests for forward calendar projections."""

from __future__ import annotations

import pytest

from src.cycle.calendar import CalendarProjection, CalendarProjector
from src.cycle.config_loader import CycleConfig
from src.cycle.cycle_tracker import CycleTracker
from src.cycle.tests.conftest import TEST_DATE, period_logs
from src.models.tracking import AppSettings


@pytest.fixture
def projector(cycle_config: CycleConfig) -> CalendarProjector:
    return CalendarProjector(cycle_config)


class TestCalendarProjector:
    def test_default_three_months(
        self, projector: CalendarProjector, cycle_config: CycleConfig, default_settings: AppSettings
    ) -> None:
        data = CycleTracker(cycle_config).calculate(
            period_logs("2026-03-02"), default_settings, as_of=TEST_DATE
        )
        projections = projector.project(data, default_settings.period_length)

        periods = [p.date for p in projections if p.type == "period"]
        ovulations = [p.date for p in projections if p.type == "ovulation"]
        assert len(periods) == 15
        assert len(ovulations) == 3
        assert periods[:5] == [
            "2026-03-30", "2026-03-31", "2026-04-01", "2026-04-02", "2026-04-03",
        ]
        assert periods[5] == "2026-04-27"
        # Ovulation sits (28 - 14) days after each projected start
        assert ovulations == ["2026-04-13", "2026-05-11", "2026-06-08"]

    def test_emission_order(self, projector: CalendarProjector, cycle_config: CycleConfig) -> None:
        data = CycleTracker(cycle_config).calculate(
            period_logs("2026-03-02"), AppSettings(period_length=2), as_of=TEST_DATE
        )
        projections = projector.project(data, 2, months_ahead=1)
        assert projections == [
            CalendarProjection("2026-03-30", "period"),
            CalendarProjection("2026-03-31", "period"),
            CalendarProjection("2026-04-13", "ovulation"),
        ]

    def test_zero_months(self, projector: CalendarProjector, cycle_config: CycleConfig) -> None:
        data = CycleTracker(cycle_config).calculate([], AppSettings(), as_of=TEST_DATE)
        assert projector.project(data, 5, months_ahead=0) == []

    def test_uses_effective_cycle_length(
        self, projector: CalendarProjector, cycle_config: CycleConfig, default_settings: AppSettings
    ) -> None:
        logs = period_logs("2026-01-01") + period_logs("2026-02-02") + period_logs("2026-03-06")
        data = CycleTracker(cycle_config).calculate(logs, default_settings, as_of=TEST_DATE)
        assert data.total_cycle_length == 32

        starts = [p.date for p in projector.project(data, 1, months_ahead=2) if p.type == "period"]
        assert starts == ["2026-04-07", "2026-05-09"]

    def test_overlapping_entries_are_kept(
        self, projector: CalendarProjector, cycle_config: CycleConfig
    ) -> None:
        # Period longer than the cycle: projections overlap and are not deduplicated
        data = CycleTracker(cycle_config).calculate(
            period_logs("2026-02-16"), AppSettings(cycle_length=21), as_of=TEST_DATE
        )
        projections = projector.project(data, 25, months_ahead=2)
        assert len(projections) == 52
        assert len({p.date for p in projections}) < 52
