"""Read models for derived cycle data returned by the API.

The engine produces dataclasses; these schemas validate straight from them
(``from_attributes``) and serialize with camelCase keys.
"""

from __future__ import annotations

from typing import Literal

from src.models.base import LunaBase
from src.models.tracking import CyclePhase, LogEntry


class CycleDataRead(LunaBase):
    current_day: int
    total_cycle_length: int
    phase: CyclePhase
    prediction: str
    next_period_date: str
    days_until_next: int
    last_period_start: str
    ovulation_day: int
    fertile_window_start: int
    is_late: bool
    has_logged_period: bool
    cycles_used: int


class CalendarProjectionRead(LunaBase):
    date: str
    type: Literal["period", "ovulation"]


class FrequencyStatRead(LunaBase):
    name: str
    count: int
    pct: int


class FlowStatsRead(LunaBase):
    light: int
    medium: int
    heavy: int
    score: float


class CycleHistoryPointRead(LunaBase):
    month: str
    total: int
    period: int
    start_date: str
    end_date: str


class AnalyticsRead(LunaBase):
    avg_period: int
    avg_cycle: int
    variability: float
    consistency_score: int
    cycle_status: str
    chart_data: list[CycleHistoryPointRead]
    has_enough_data: bool
    symptom_stats: list[FrequencyStatRead]
    mood_stats: list[FrequencyStatRead]
    flow_stats: FlowStatsRead


class GamificationResultRead(LunaBase):
    unlocked_badges: list[str]
    level_up: bool
    new_level: int
    points_earned: int


class LogSaveResponse(LunaBase):
    log: LogEntry
    gamification: GamificationResultRead


class LevelProgressRead(LunaBase):
    current_points: int
    next_level_points: int
    points_remaining: int
    percentage: float


class LevelRewardRead(LunaBase):
    level: int
    xp: int
    reward: str | None = None


class BadgeProgressRead(LunaBase):
    id: str
    name: str
    description: str
    icon: str
    unlocked: bool
    current: int
    target: int
    label: str


class ActivityDayRead(LunaBase):
    date: str
    day_name: str
    is_logged: bool
    is_today: bool


class InsightRead(LunaBase):
    phase: CyclePhase
    day: int
    insight: str
