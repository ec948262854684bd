"""Gamification state machine: streaks, points, levels and badges.

Driven by log mutations:

- every save/delete recalculates the streak (idempotent, safe to repeat)
- a save that creates a *new* date earns DAILY_LOG points (edits earn
  nothing, so re-saving a day cannot farm points)
- badges unlock once each and pay a fixed BADGE_UNLOCK bonus
- at most one level-up is granted per save, even if the points crossed
  several thresholds at once; the next save picks up the remainder

Level and badge progress helpers are read-only views for display.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta

from src.cycle.config_loader import CycleConfig, LevelDef, get_cycle_config
from src.cycle.dates import day_diff, parse_date, today_string
from src.cycle.profile_store import ProfileStore
from src.models.tracking import LogEntry, UserStats

logger = logging.getLogger("lunaloop.cycle.gamification")

BADGE_NEWBIE = "badge_newbie"
BADGE_FIRST_LOG = "badge_first_log"
BADGE_STREAK_7 = "badge_streak_7"
BADGE_HYDRATION_10 = "badge_hydration_10"
BADGE_MOOD_20 = "badge_mood_20"
BADGE_CYCLE_3 = "badge_cycle_3"


@dataclass
class GamificationResult:
    """Outcome of one save, for toasts and level-up modals."""

    unlocked_badges: list[str] = field(default_factory=list)
    level_up: bool = False
    new_level: int = 1
    points_earned: int = 0


@dataclass
class LevelProgress:
    current_points: int
    next_level_points: int
    points_remaining: int
    percentage: float


@dataclass
class BadgeProgress:
    current: int
    target: int
    label: str = "actions"


@dataclass
class ActivityDay:
    date: str
    day_name: str
    is_logged: bool
    is_today: bool


def compute_streak(log_dates: list[str], today: str) -> int:
    """Consecutive logged days ending today or yesterday.

    The streak is alive when today or yesterday has a log; it then counts
    back one day at a time from the most recent of those two and stops at
    the first gap.  Logs dated after ``today`` are ignored.
    """
    dates = set(log_dates)
    if today in dates:
        anchor = today
    else:
        yesterday = (parse_date(today) - timedelta(days=1)).isoformat()
        if yesterday not in dates:
            return 0
        anchor = yesterday

    ordered = sorted((d for d in dates if d <= anchor), reverse=True)
    streak = 1
    for newer, older in zip(ordered, ordered[1:]):
        if day_diff(older, newer) != 1:
            break
        streak += 1
    return streak


def logged_span_days(log_dates: list[str]) -> int:
    """Days between the oldest and newest log."""
    if not log_dates:
        return 0
    return day_diff(min(log_dates), max(log_dates))


class GamificationEngine:
    """Apply the gamification rules against persisted ``UserStats``.

    Usage::

        engine = GamificationEngine(ProfileStore(store))
        engine.recalculate_streak(logs)
        result = engine.check_rules(is_new_log_for_day=True, entry=entry, logs=logs)
    """

    def __init__(self, profile: ProfileStore, config: CycleConfig | None = None) -> None:
        self._profile = profile
        self._config = config or get_cycle_config()

    @property
    def _rules(self):
        return self._config.gamification

    # ------------------------------------------------------------------
    # Streak
    # ------------------------------------------------------------------

    def recalculate_streak(self, logs: list[LogEntry], as_of: date | None = None) -> int:
        """Recompute the streak and persist it when it changed.

        Reaching the streak-badge threshold unlocks ``badge_streak_7`` and
        pays the badge bonus.  No level check happens here.
        """
        streak = compute_streak([entry.date for entry in logs], today_string(as_of))
        stats = self._profile.get_user_stats()
        if stats.streak == streak:
            return streak

        stats.streak = streak
        if streak >= self._rules.streak_badge_days and not stats.has_badge(BADGE_STREAK_7):
            stats.unlocked_badges.append(BADGE_STREAK_7)
            stats.points += self._rules.point("BADGE_UNLOCK")
            logger.info("Badge unlocked: %s (streak %d)", BADGE_STREAK_7, streak)
        self._profile.save_user_stats(stats)
        return streak

    # ------------------------------------------------------------------
    # Points, badges, levels
    # ------------------------------------------------------------------

    def check_rules(
        self,
        is_new_log_for_day: bool,
        entry: LogEntry,
        logs: list[LogEntry],
    ) -> GamificationResult:
        """Award points and badges for a save and apply at most one level-up.

        Args:
            is_new_log_for_day: True when the save created a new date.
            entry:              The entry that was saved.
            logs:               All logs *after* the save.
        """
        rules = self._rules
        stats = self._profile.get_user_stats()
        bonus = rules.point("BADGE_UNLOCK")
        unlocked: list[str] = []
        points = 0

        def unlock(badge_id: str) -> None:
            nonlocal points
            if not stats.has_badge(badge_id) and badge_id not in unlocked:
                unlocked.append(badge_id)
                points += bonus

        if is_new_log_for_day:
            points += rules.point("DAILY_LOG")
            unlock(BADGE_FIRST_LOG)

        hydration_days = sum(1 for log in logs if log.water_intake >= rules.water_goal_units)
        if hydration_days >= rules.hydration_badge_days:
            unlock(BADGE_HYDRATION_10)

        if is_new_log_for_day and entry.water_intake >= rules.water_goal_units:
            points += rules.point("WATER_GOAL")

        mood_logs = sum(1 for log in logs if log.mood is not None)
        if mood_logs >= rules.mood_badge_logs:
            unlock(BADGE_MOOD_20)

        if logs and logged_span_days([log.date for log in logs]) >= rules.cycle_badge_span_days:
            unlock(BADGE_CYCLE_3)

        result = GamificationResult(new_level=stats.level)
        if points == 0 and not unlocked:
            return result

        stats.points += points
        next_level = rules.level(stats.level + 1)
        # One step only, by contract: a big jump levels up over several saves
        if next_level is not None and stats.points >= next_level.xp:
            stats.level += 1
            result.level_up = True
            logger.info("Level up: %d -> %d (%d pts)", stats.level - 1, stats.level, stats.points)
        stats.unlocked_badges = [*stats.unlocked_badges, *unlocked]
        self._profile.save_user_stats(stats)

        for badge_id in unlocked:
            logger.info("Badge unlocked: %s", badge_id)

        result.unlocked_badges = unlocked
        result.new_level = stats.level
        result.points_earned = points
        return result

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def level_progress(self, points: int, level: int) -> LevelProgress:
        if level >= self._rules.max_level:
            return LevelProgress(points, points, 0, 100.0)
        current = self._rules.level(level)
        nxt = self._rules.level(level + 1)

        base_xp = current.xp if current else 0
        span = nxt.xp - base_xp
        in_level = max(0, points - base_xp)
        percentage = min(100.0, max(0.0, in_level / span * 100)) if span > 0 else 100.0
        return LevelProgress(
            current_points=points,
            next_level_points=nxt.xp,
            points_remaining=nxt.xp - points,
            percentage=percentage,
        )

    def next_theme_reward(self, level: int) -> LevelDef | None:
        for number in sorted(self._rules.levels):
            candidate = self._rules.levels[number]
            if number > level and candidate.reward is not None:
                return candidate
        return None

    def badge_progress(
        self, badge_id: str, logs: list[LogEntry], stats: UserStats
    ) -> BadgeProgress | None:
        rules = self._rules
        badge = rules.badge(badge_id)
        if badge is None:
            return None

        current = 0
        label = "actions"
        if badge_id == BADGE_NEWBIE:
            current = 1
        elif badge_id == BADGE_FIRST_LOG:
            current = 1 if logs else 0
        elif badge_id == BADGE_STREAK_7:
            current, label = stats.streak, "days"
        elif badge_id == BADGE_HYDRATION_10:
            current = sum(1 for log in logs if log.water_intake >= rules.water_goal_units)
            label = "days"
        elif badge_id == BADGE_MOOD_20:
            current = sum(1 for log in logs if log.mood is not None)
            label = "moods"
        elif badge_id == BADGE_CYCLE_3:
            span = logged_span_days([log.date for log in logs])
            current = min(badge.target, math.floor(span / rules.cycle_badge_cycle_days))
            label = "cycles"
        return BadgeProgress(current=current, target=badge.target, label=label)

    def weekly_activity(self, logs: list[LogEntry], as_of: date | None = None) -> list[ActivityDay]:
        """The last 7 days, oldest first, marking which ones have a log."""
        logged = {entry.date for entry in logs}
        today = parse_date(today_string(as_of))
        days: list[ActivityDay] = []
        for back in range(6, -1, -1):
            d = today - timedelta(days=back)
            iso = d.isoformat()
            days.append(
                ActivityDay(
                    date=iso,
                    day_name=d.strftime("%a")[0],
                    is_logged=iso in logged,
                    is_today=back == 0,
                )
            )
        return days
