"""Gamification views: stats, level progress, badges and weekly activity."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from src.dependencies import Tracker
from src.models.cycle import (
    ActivityDayRead,
    BadgeProgressRead,
    LevelProgressRead,
    LevelRewardRead,
)
from src.models.tracking import UserStats

router = APIRouter(prefix="/stats", tags=["gamification"])


@router.get("", response_model=UserStats)
def get_stats(tracker: Tracker) -> Any:
    tracker.update_streak_on_load()
    return tracker.user_stats()


@router.get("/level", response_model=LevelProgressRead)
def get_level_progress(tracker: Tracker) -> Any:
    return LevelProgressRead.model_validate(tracker.level_progress())


@router.get("/next-reward", response_model=LevelRewardRead | None)
def get_next_reward(tracker: Tracker) -> Any:
    reward = tracker.next_theme_reward()
    return LevelRewardRead.model_validate(reward) if reward else None


@router.get("/badges", response_model=list[BadgeProgressRead])
def list_badges(tracker: Tracker) -> Any:
    stats = tracker.user_stats()
    progress = tracker.all_badge_progress()
    return [
        BadgeProgressRead(
            id=badge.id,
            name=badge.name,
            description=badge.description,
            icon=badge.icon,
            unlocked=stats.has_badge(badge.id),
            current=progress[badge.id].current,
            target=progress[badge.id].target,
            label=progress[badge.id].label,
        )
        for badge in tracker.config.gamification.badges
    ]


@router.get("/weekly", response_model=list[ActivityDayRead])
def get_weekly_activity(tracker: Tracker) -> Any:
    return [ActivityDayRead.model_validate(day) for day in tracker.weekly_activity()]
