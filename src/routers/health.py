"""Health check endpoint."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from src.config import get_settings
from src.cycle.config_loader import get_cycle_config

router = APIRouter(tags=["system"])
logger = logging.getLogger("lunaloop.health")


@router.get("/health")
async def health_check() -> dict:
    """Liveness probe. Returns 200 if the API process is up.

    Also reports which cycle config version is loaded and whether the
    insight service has an API key (it degrades to canned insights without).
    """
    settings = get_settings()
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "cycle_config": get_cycle_config().version,
        "insights": "online" if settings.anthropic_api_key else "offline",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
