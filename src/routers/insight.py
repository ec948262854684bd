"""Phase insight for today."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from src.cycle.dates import today_string
from src.dependencies import Insights, Tracker
from src.models.cycle import InsightRead

router = APIRouter(prefix="/insight", tags=["insight"])


@router.get("", response_model=InsightRead)
async def get_insight(tracker: Tracker, insights: Insights) -> Any:
    """Insight for today's phase and mood.  Always returns text; the model
    call falls back to canned lines when offline or failing."""
    data = tracker.cycle_data()
    today_log = tracker.logs.get_by_date(today_string())
    mood = today_log.mood if today_log and today_log.mood else "Neutral"
    text = await insights.get_insight(data.phase, data.current_day, mood)
    return InsightRead(phase=data.phase, day=data.current_day, insight=text)
