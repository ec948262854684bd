"""Shared fixtures and log builders for cycle engine tests."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.cycle.config_loader import CycleConfig, load_cycle_config
from src.cycle.service import CycleService
from src.models.tracking import AppSettings, FlowIntensity, LogEntry
from src.services.storage import InMemoryStore

# Reference "today" for every date-dependent test
TEST_DATE = date(2026, 3, 15)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def days_ago(n: int, today: date = TEST_DATE) -> str:
    return (today - timedelta(days=n)).isoformat()


def make_log(
    date_str: str,
    flow: FlowIntensity | str | None = None,
    mood: str | None = None,
    symptoms: list[str] | None = None,
    water: int = 0,
    spotting: str | None = None,
) -> LogEntry:
    return LogEntry(
        date=date_str,
        flow=flow,
        mood=mood,
        symptoms=symptoms or [],
        water_intake=water,
        spotting=spotting,
    )


def period_logs(start: str, days: int = 5, flow: str = "Medium") -> list[LogEntry]:
    """Consecutive flow-bearing logs starting at ``start``."""
    first = date.fromisoformat(start)
    return [make_log((first + timedelta(days=i)).isoformat(), flow=flow) for i in range(days)]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cycle_config() -> CycleConfig:
    """Load the bundled cycle config."""
    return load_cycle_config()


@pytest.fixture
def default_settings() -> AppSettings:
    return AppSettings()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def service(store: InMemoryStore, cycle_config: CycleConfig) -> CycleService:
    return CycleService(store, cycle_config)
