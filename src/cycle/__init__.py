"""LunaLoop cycle engine.

Turns dated daily logs into cycle phase, next-period predictions, calendar
projections, historical analytics and gamification state.  Persistence goes
through the ``KeyValueStore`` injected into ``CycleService``.

Modules:
    dates           — local-calendar date strings and day arithmetic
    log_store       — daily log CRUD over the key-value store
    profile_store   — settings, reminders and user stats records
    cycle_tracker   — period detection, effective cycle length, phase
    calendar        — forward period/ovulation projections
    analytics       — frequency tables, flow score, consistency score
    gamification    — streaks, points, levels, badges
    insights        — Claude phase insights with cache + fallback
    export          — CSV export
    config_loader   — load/validate/hot-reload cycle_config.yaml
    service         — CycleService facade (save/delete entry points)
"""

from src.cycle.config_loader import CycleConfig, get_cycle_config
from src.cycle.cycle_tracker import CycleData, CycleTracker
from src.cycle.service import CycleService

__all__ = [
    "CycleConfig",
    "CycleData",
    "CycleService",
    "CycleTracker",
    "get_cycle_config",
]
