"""Cycle tracking service: the mutation entry points and read models.

Wires the log store, profile store and engines over one ``KeyValueStore``.
Every read recomputes from the stored logs; nothing derived is cached, so
calls are idempotent and safe to repeat.

Usage::

    service = CycleService(JsonFileStore(".lunaloop"))
    result = service.save_log(LogEntry(date="2026-03-01", flow="Medium"))
    service.cycle_data().phase          # CyclePhase.menstrual
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from src.cycle.analytics import AnalyticsData, AnalyticsEngine
from src.cycle.calendar import CalendarProjection, CalendarProjector
from src.cycle.config_loader import CycleConfig, LevelDef, get_cycle_config
from src.cycle.cycle_tracker import CycleData, CycleTracker
from src.cycle.dates import parse_date, today_string
from src.cycle.export import logs_to_csv
from src.cycle.gamification import (
    ActivityDay,
    BadgeProgress,
    GamificationEngine,
    GamificationResult,
    LevelProgress,
)
from src.cycle.log_store import LogStore
from src.cycle.profile_store import ProfileStore
from src.models.tracking import (
    AppSettings,
    FlowIntensity,
    LogEntry,
    LogEntryUpdate,
    PeriodReminder,
    ReminderSettings,
    TimedReminder,
    UserStats,
)
from src.services.storage import KeyValueStore

logger = logging.getLogger("lunaloop.cycle.service")

_DEMO_FLOWS = [
    FlowIntensity.light,
    FlowIntensity.heavy,
    FlowIntensity.medium,
    FlowIntensity.light,
    FlowIntensity.light,
]


class CycleService:
    """Facade over the cycle engine for one installation."""

    def __init__(self, store: KeyValueStore, config: CycleConfig | None = None) -> None:
        self._store = store
        self._config = config or get_cycle_config()
        self.logs = LogStore(store)
        self.profile = ProfileStore(store)
        self.tracker = CycleTracker(self._config)
        self.projector = CalendarProjector(self._config)
        self.analytics_engine = AnalyticsEngine(self._config)
        self.gamification = GamificationEngine(self.profile, self._config)

    @property
    def config(self) -> CycleConfig:
        return self._config

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def save_log(self, entry: LogEntry, as_of: date | None = None) -> GamificationResult:
        """Upsert a full entry, then refresh the streak and apply the rules."""
        is_new = self.logs.upsert(entry)
        logger.info("Log %s for %s", "created" if is_new else "updated", entry.date)
        logs = self.logs.get_all()
        self.gamification.recalculate_streak(logs, as_of)
        return self.gamification.check_rules(is_new, entry, logs)

    def update_log(
        self, date_str: str, update: LogEntryUpdate, as_of: date | None = None
    ) -> tuple[LogEntry, GamificationResult] | None:
        """Merge a partial update into an existing entry.

        Edits never earn daily points but can still complete a badge (for
        example the tenth hydration day).  Returns None if the date has no log.
        """
        merged = self.logs.merge(date_str, update)
        if merged is None:
            return None
        logs = self.logs.get_all()
        self.gamification.recalculate_streak(logs, as_of)
        return merged, self.gamification.check_rules(False, merged, logs)

    def delete_log(self, date_str: str, as_of: date | None = None) -> bool:
        deleted = self.logs.delete(date_str)
        if deleted:
            logger.info("Log deleted for %s", date_str)
        self.gamification.recalculate_streak(self.logs.get_all(), as_of)
        return deleted

    def update_streak_on_load(self, as_of: date | None = None) -> int:
        """Refresh the streak when the app is opened or brought to the front."""
        return self.gamification.recalculate_streak(self.logs.get_all(), as_of)

    # ------------------------------------------------------------------
    # Cycle reads
    # ------------------------------------------------------------------

    def cycle_data(self, as_of: date | None = None) -> CycleData:
        return self.tracker.calculate(self.logs.get_all(), self.profile.get_settings(), as_of)

    def calendar_projections(
        self, months_ahead: int | None = None, as_of: date | None = None
    ) -> list[CalendarProjection]:
        settings = self.profile.get_settings()
        data = self.tracker.calculate(self.logs.get_all(), settings, as_of)
        return self.projector.project(data, settings.period_length, months_ahead)

    def analytics(self) -> AnalyticsData:
        return self.analytics_engine.compute(self.logs.get_all(), self.profile.get_settings())

    # ------------------------------------------------------------------
    # Gamification reads
    # ------------------------------------------------------------------

    def user_stats(self) -> UserStats:
        return self.profile.get_user_stats()

    def level_progress(self) -> LevelProgress:
        stats = self.profile.get_user_stats()
        return self.gamification.level_progress(stats.points, stats.level)

    def next_theme_reward(self) -> LevelDef | None:
        return self.gamification.next_theme_reward(self.profile.get_user_stats().level)

    def badge_progress(self, badge_id: str) -> BadgeProgress | None:
        return self.gamification.badge_progress(
            badge_id, self.logs.get_all(), self.profile.get_user_stats()
        )

    def all_badge_progress(self) -> dict[str, BadgeProgress]:
        logs = self.logs.get_all()
        stats = self.profile.get_user_stats()
        progress: dict[str, BadgeProgress] = {}
        for badge in self._config.gamification.badges:
            item = self.gamification.badge_progress(badge.id, logs, stats)
            if item is not None:
                progress[badge.id] = item
        return progress

    def weekly_activity(self, as_of: date | None = None) -> list[ActivityDay]:
        return self.gamification.weekly_activity(self.logs.get_all(), as_of)

    # ------------------------------------------------------------------
    # Data management
    # ------------------------------------------------------------------

    def export_csv(self) -> str:
        return logs_to_csv(self.logs.get_all())

    def clear_all_data(self) -> None:
        self._store.clear()
        logger.info("All data cleared")

    def seed_demo_data(self, as_of: date | None = None) -> None:
        """Replace everything with a demo profile and three logged periods."""
        self.clear_all_data()
        today = parse_date(today_string(as_of))

        self.profile.save_settings(
            AppSettings(
                privacy_mode=False,
                onboarded=True,
                cycle_length=29,
                period_length=5,
                theme="Forest Fairy",
            )
        )
        self.profile.save_user_stats(
            UserStats(
                name="Demo User",
                streak=0,
                points=3450,
                level=5,
                unlocked_badges=[
                    "badge_newbie",
                    "badge_first_log",
                    "badge_hydration_10",
                    "badge_mood_20",
                ],
            )
        )
        self.profile.save_reminders(
            ReminderSettings(
                daily_check_in=TimedReminder(enabled=True, time="20:00"),
                period_prediction=PeriodReminder(enabled=True, days_before=2, time="09:00"),
                pill=TimedReminder(enabled=True, time="08:00"),
                fertile_window=TimedReminder(enabled=True, time="10:00"),
            )
        )

        entries: list[LogEntry] = []
        for cycle in range(3):
            days_back_start = 5 + cycle * 30
            for day, flow in enumerate(_DEMO_FLOWS):
                entries.append(
                    LogEntry(
                        date=(today - timedelta(days=days_back_start - day)).isoformat(),
                        flow=flow,
                        symptoms=["Cramps", "Headache"],
                        mood="Tired" if cycle % 2 == 0 else "Happy",
                        water_intake=4,
                        spotting=None,
                    )
                )
        self.logs.replace_all(entries)
        self.gamification.recalculate_streak(entries, as_of)
        logger.info("Seeded demo data: %d logs", len(entries))
