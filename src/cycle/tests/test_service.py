"""Tests for the CycleService facade: partial updates, reads and data management."""

from __future__ import annotations

from src.cycle.service import CycleService
from src.cycle.tests.conftest import TEST_DATE, days_ago, make_log, period_logs
from src.models.tracking import CyclePhase, FlowIntensity, LogEntryUpdate
from src.services.storage import InMemoryStore


class TestUpdateLog:
    def test_missing_date(self, service: CycleService) -> None:
        assert service.update_log("2026-03-01", LogEntryUpdate(mood="Calm")) is None

    def test_partial_update_earns_no_daily_points(self, service: CycleService) -> None:
        service.save_log(make_log(days_ago(0), flow="Light"), as_of=TEST_DATE)
        points = service.user_stats().points

        outcome = service.update_log(days_ago(0), LogEntryUpdate(water_intake=8), as_of=TEST_DATE)
        assert outcome is not None
        entry, result = outcome
        assert entry.flow is FlowIntensity.light
        assert entry.water_intake == 8
        assert result.points_earned == 0
        assert service.user_stats().points == points

    def test_update_can_complete_a_badge(self, service: CycleService) -> None:
        for n in range(10):
            service.save_log(make_log(days_ago(n + 10), water=8 if n else 0), as_of=TEST_DATE)
        assert not service.user_stats().has_badge("badge_hydration_10")

        _, result = service.update_log(days_ago(10), LogEntryUpdate(water_intake=9), as_of=TEST_DATE)
        assert result.unlocked_badges == ["badge_hydration_10"]


class TestReads:
    def test_cycle_data_from_logs(self, service: CycleService) -> None:
        for entry in period_logs("2026-02-01") + period_logs("2026-03-02"):
            service.save_log(entry, as_of=TEST_DATE)
        data = service.cycle_data(as_of=TEST_DATE)
        assert data.total_cycle_length == 29
        assert data.phase is CyclePhase.ovulation

    def test_calendar_projections_use_settings(self, service: CycleService) -> None:
        service.save_log(make_log("2026-03-02", flow="Medium"), as_of=TEST_DATE)
        projections = service.calendar_projections(months_ahead=1, as_of=TEST_DATE)
        assert [p.type for p in projections].count("period") == 5
        assert projections[0].date == "2026-03-30"

    def test_all_badge_progress(self, service: CycleService) -> None:
        progress = service.all_badge_progress()
        assert set(progress) == {b.id for b in service.config.gamification.badges}
        assert progress["badge_newbie"].current == 1

    def test_weekly_activity(self, service: CycleService) -> None:
        service.save_log(make_log(days_ago(1)), as_of=TEST_DATE)
        week = service.weekly_activity(as_of=TEST_DATE)
        assert len(week) == 7
        assert week[5].is_logged is True


class TestDataManagement:
    def test_clear_all_data(self, service: CycleService, store: InMemoryStore) -> None:
        service.save_log(make_log(days_ago(0), flow="Light"), as_of=TEST_DATE)
        store.set("insight_2026-03-15_Menstrual", "Cached")
        service.clear_all_data()

        assert store.keys() == []
        assert service.logs.get_all() == []
        assert service.user_stats().points == 100

    def test_export_csv(self, service: CycleService) -> None:
        service.save_log(make_log("2026-03-01", flow="Medium", symptoms=["Cramps"]), as_of=TEST_DATE)
        assert service.export_csv().split("\n")[1] == "2026-03-01,Medium,,,0,Cramps"

    def test_seed_demo_data(self, service: CycleService) -> None:
        service.save_log(make_log("2020-01-01", mood="Old"), as_of=TEST_DATE)
        service.seed_demo_data(as_of=TEST_DATE)

        logs = service.logs.get_all()
        assert len(logs) == 15
        assert "2020-01-01" not in {log.date for log in logs}

        settings = service.profile.get_settings()
        assert settings.cycle_length == 29
        assert settings.theme == "Forest Fairy"
        assert settings.onboarded is True

        stats = service.user_stats()
        assert stats.name == "Demo User"
        assert stats.points == 3450
        assert stats.level == 5
        # Five consecutive logs ending yesterday
        assert stats.streak == 5

        data = service.cycle_data(as_of=TEST_DATE)
        assert data.period_starts == [days_ago(65), days_ago(35), days_ago(5)]
        assert data.total_cycle_length == 30
        assert data.current_day == 6
        assert data.phase is CyclePhase.follicular

        analytics = service.analytics()
        assert analytics.has_enough_data is True
        assert analytics.consistency_score == 100
        assert analytics.symptom_stats[0].pct == 100

        reminders = service.profile.get_reminders()
        assert reminders.period_prediction.days_before == 2

    def test_reads_survive_impossible_stored_day(self, service: CycleService, store: InMemoryStore) -> None:
        store.set("lunaloop_logs", [{"date": "2024-02-30", "flow": "Heavy"}])
        service.save_log(make_log("2026-03-02", flow="Medium"), as_of=TEST_DATE)

        assert [log.date for log in service.logs.get_all()] == ["2026-03-02"]
        data = service.cycle_data(as_of=TEST_DATE)
        assert data.period_starts == ["2026-03-02"]
        assert data.has_logged_period is True
