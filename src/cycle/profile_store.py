"""Typed access to the singleton profile records: app settings, reminder
preferences and gamification stats.

Each record resolves to its documented default when missing or malformed.
Settings change only through the per-section update functions, which take
pydantic update models so bounds are checked before anything is written.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from pydantic import ValidationError

from src.cycle.log_store import STORAGE_KEYS
from src.models.base import LunaBase
from src.models.tracking import (
    AppSettings,
    CycleSettingsUpdate,
    PreferencesUpdate,
    ReminderSettings,
    UserStats,
)
from src.services.storage import KeyValueStore

logger = logging.getLogger("lunaloop.cycle.profile_store")

_M = TypeVar("_M", bound=LunaBase)


class ProfileStore:
    """Settings, reminders and user stats."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def _load(self, key: str, model: type[_M]) -> _M:
        raw = self._store.get(key)
        if raw is None:
            return model()
        try:
            return model.model_validate(raw)
        except ValidationError:
            logger.warning("Stored %s is invalid — using defaults", key)
            return model()

    # ------------------------------------------------------------------
    # App settings
    # ------------------------------------------------------------------

    def get_settings(self) -> AppSettings:
        return self._load(STORAGE_KEYS["SETTINGS"], AppSettings)

    def save_settings(self, settings: AppSettings) -> None:
        self._store.set(STORAGE_KEYS["SETTINGS"], settings.to_store())

    def update_cycle_settings(self, update: CycleSettingsUpdate) -> AppSettings:
        """Change the declared cycle/period length."""
        return self._apply(update.model_dump(exclude_none=True))

    def update_preferences(self, update: PreferencesUpdate) -> AppSettings:
        """Change privacy mode, onboarding flag or theme."""
        return self._apply(update.model_dump(exclude_none=True))

    def _apply(self, changes: dict) -> AppSettings:
        current = self.get_settings()
        updated = current.model_copy(update=changes)
        self.save_settings(updated)
        if changes:
            logger.info("Settings updated: %s", ", ".join(sorted(changes)))
        return updated

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------

    def get_reminders(self) -> ReminderSettings:
        raw = self._store.get(STORAGE_KEYS["REMINDERS"])
        if isinstance(raw, dict) and "timeBased" in raw:
            # Pre-release shape; nothing in it maps onto the current fields
            return ReminderSettings()
        return self._load(STORAGE_KEYS["REMINDERS"], ReminderSettings)

    def save_reminders(self, reminders: ReminderSettings) -> None:
        self._store.set(STORAGE_KEYS["REMINDERS"], reminders.to_store())

    # ------------------------------------------------------------------
    # User stats
    # ------------------------------------------------------------------

    def get_user_stats(self) -> UserStats:
        return self._load(STORAGE_KEYS["USER"], UserStats)

    def save_user_stats(self, stats: UserStats) -> None:
        self._store.set(STORAGE_KEYS["USER"], stats.to_store())
