"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from src.config import Settings, get_settings
from src.cycle.insights import InsightService
from src.cycle.service import CycleService
from src.services.storage import JsonFileStore, KeyValueStore


@lru_cache
def get_store() -> KeyValueStore:
    """Process-wide file store rooted at ``settings.data_dir``.

    Tests override this dependency with an ``InMemoryStore``.
    """
    return JsonFileStore(get_settings().data_dir)


def get_cycle_service(store: Annotated[KeyValueStore, Depends(get_store)]) -> CycleService:
    return CycleService(store)


def get_insight_service(
    store: Annotated[KeyValueStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> InsightService:
    return InsightService(store, settings)


# Annotated shortcuts for route signatures
Tracker = Annotated[CycleService, Depends(get_cycle_service)]
Insights = Annotated[InsightService, Depends(get_insight_service)]
AppConfig = Annotated[Settings, Depends(get_settings)]
