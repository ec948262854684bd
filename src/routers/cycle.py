"""Current cycle state and forward calendar projections."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query

from src.dependencies import Tracker
from src.models.cycle import AnalyticsRead, CalendarProjectionRead, CycleDataRead

router = APIRouter(tags=["cycle"])


@router.get("/cycle", response_model=CycleDataRead)
def get_cycle(tracker: Tracker) -> Any:
    return CycleDataRead.model_validate(tracker.cycle_data())


@router.get("/cycle/projections", response_model=list[CalendarProjectionRead])
def get_projections(
    tracker: Tracker,
    months: int | None = Query(default=None, ge=1, le=24),
) -> Any:
    return [
        CalendarProjectionRead.model_validate(p)
        for p in tracker.calendar_projections(months)
    ]


@router.get("/analytics", response_model=AnalyticsRead)
def get_analytics(tracker: Tracker) -> Any:
    return AnalyticsRead.model_validate(tracker.analytics())
