"""Pydantic models for cycle tracking: daily logs, user-declared settings,
reminder preferences and gamification stats.

These are the shapes persisted in the key-value store.  Derived read
models (cycle data, analytics, projections) live in ``src.models.cycle``.
"""

from __future__ import annotations

import re
from datetime import date
from enum import Enum

from pydantic import Field, field_validator

from src.models.base import LunaBase

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


# ---------- Enums ----------

class FlowIntensity(str, Enum):
    light = "Light"
    medium = "Medium"
    heavy = "Heavy"
    super_ = "Super"


class CyclePhase(str, Enum):
    menstrual = "Menstrual"
    follicular = "Follicular"
    ovulation = "Ovulation"
    luteal = "Luteal"


# ---------- Daily logs ----------

def check_iso_date(value: str) -> str:
    """Accept only an existing calendar day written as ``YYYY-MM-DD``."""
    if not _ISO_DATE_RE.match(value):
        raise ValueError(f"date must be YYYY-MM-DD, got {value!r}")
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"{value!r} is not a calendar date") from exc
    return value


def _dedupe(values: list[str]) -> list[str]:
    # Symptoms are a set for logic but keep their display order
    return list(dict.fromkeys(v for v in values if v))


class LogEntry(LunaBase):
    """One day's log.  ``date`` is the unique key (local calendar day)."""

    date: str
    symptoms: list[str] = Field(default_factory=list)
    mood: str | None = None
    flow: FlowIntensity | None = None
    spotting: str | None = None
    water_intake: int = Field(default=0, ge=0)

    @field_validator("date")
    @classmethod
    def valid_date(cls, v: str) -> str:
        return check_iso_date(v)

    @field_validator("symptoms")
    @classmethod
    def unique_symptoms(cls, v: list[str]) -> list[str]:
        return _dedupe(v)

    @property
    def is_period_day(self) -> bool:
        return self.flow is not None


class LogEntryBody(LunaBase):
    """Full log body for a date-addressed save (``PUT /logs/{date}``)."""

    symptoms: list[str] = Field(default_factory=list)
    mood: str | None = None
    flow: FlowIntensity | None = None
    spotting: str | None = None
    water_intake: int = Field(default=0, ge=0)

    def for_date(self, date_str: str) -> LogEntry:
        return LogEntry(date=date_str, **self.model_dump())


class LogEntryUpdate(LunaBase):
    """Partial update; only fields that were explicitly set are merged."""

    symptoms: list[str] | None = None
    mood: str | None = None
    flow: FlowIntensity | None = None
    spotting: str | None = None
    water_intake: int | None = Field(default=None, ge=0)

    @field_validator("symptoms")
    @classmethod
    def unique_symptoms(cls, v: list[str] | None) -> list[str] | None:
        return _dedupe(v) if v is not None else None


# ---------- Settings ----------

class AppSettings(LunaBase):
    """User-declared baseline.  Not range-checked here: persisted values are
    trusted, only the update models below enforce bounds."""

    privacy_mode: bool = False
    onboarded: bool = False
    cycle_length: int = 28
    period_length: int = 5
    theme: str = "Pretty in Pink"


class CycleSettingsUpdate(LunaBase):
    cycle_length: int | None = Field(default=None, ge=21, le=45)
    period_length: int | None = Field(default=None, ge=2, le=10)


class PreferencesUpdate(LunaBase):
    privacy_mode: bool | None = None
    onboarded: bool | None = None
    theme: str | None = Field(default=None, min_length=1)


# ---------- Reminders ----------

class TimedReminder(LunaBase):
    enabled: bool = False
    time: str = Field(default="09:00", pattern=_TIME_PATTERN)


class PeriodReminder(TimedReminder):
    enabled: bool = True
    days_before: int = Field(default=1, ge=0, le=7)


class ReminderSettings(LunaBase):
    daily_check_in: TimedReminder = Field(
        default_factory=lambda: TimedReminder(enabled=False, time="20:00")
    )
    period_prediction: PeriodReminder = Field(default_factory=PeriodReminder)
    pill: TimedReminder = Field(default_factory=TimedReminder)
    fertile_window: TimedReminder = Field(
        default_factory=lambda: TimedReminder(enabled=True, time="09:00")
    )


# ---------- Gamification ----------

class UserStats(LunaBase):
    name: str = "User"
    streak: int = Field(default=0, ge=0)
    points: int = Field(default=100, ge=0)
    level: int = Field(default=1, ge=1)
    unlocked_badges: list[str] = Field(default_factory=lambda: ["badge_newbie"])

    @field_validator("unlocked_badges")
    @classmethod
    def unique_badges(cls, v: list[str]) -> list[str]:
        return _dedupe(v)

    def has_badge(self, badge_id: str) -> bool:
        return badge_id in self.unlocked_badges
