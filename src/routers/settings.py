"""User-declared settings, reminder preferences and data management."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from src.dependencies import AppConfig, Tracker
from src.models.tracking import (
    AppSettings,
    CycleSettingsUpdate,
    PreferencesUpdate,
    ReminderSettings,
)

router = APIRouter(prefix="/settings", tags=["settings"])
logger = logging.getLogger("lunaloop.settings")


@router.get("", response_model=AppSettings)
def get_settings(tracker: Tracker) -> Any:
    return tracker.profile.get_settings()


@router.patch("/cycle", response_model=AppSettings)
def update_cycle_settings(tracker: Tracker, body: CycleSettingsUpdate) -> Any:
    return tracker.profile.update_cycle_settings(body)


@router.patch("/preferences", response_model=AppSettings)
def update_preferences(tracker: Tracker, body: PreferencesUpdate) -> Any:
    return tracker.profile.update_preferences(body)


@router.get("/reminders", response_model=ReminderSettings)
def get_reminders(tracker: Tracker) -> Any:
    return tracker.profile.get_reminders()


@router.put("/reminders", response_model=ReminderSettings)
def save_reminders(tracker: Tracker, body: ReminderSettings) -> Any:
    tracker.profile.save_reminders(body)
    return body


@router.delete("/data", status_code=204)
def clear_all_data(tracker: Tracker) -> None:
    tracker.clear_all_data()


@router.post("/demo", status_code=204)
def seed_demo(tracker: Tracker, config: AppConfig) -> None:
    if not config.allow_demo_seed:
        raise HTTPException(status_code=403, detail="Demo seeding is disabled")
    tracker.seed_demo_data()
    logger.info("Demo data seeded via API")
