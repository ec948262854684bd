"""LunaLoop API — FastAPI application entry point.

Run locally:
    uvicorn src.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import get_settings
from src.cycle.config_loader import get_cycle_config
from src.dependencies import get_store
from src.routers import cycle, health, insight, logs, settings, stats

# ---------- Logging ----------

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("lunaloop")


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup / shutdown hooks."""
    app_settings = get_settings()
    logger.info(
        "Starting LunaLoop API v%s [%s]",
        app_settings.app_version,
        app_settings.environment,
    )
    # Fail fast on a bad cycle_config.yaml instead of on the first request
    get_cycle_config()
    logger.info("Data directory: %s", app_settings.data_dir)
    get_store()
    yield
    logger.info("LunaLoop API shut down")


# ---------- App factory ----------

def create_app() -> FastAPI:
    app_settings = get_settings()

    app = FastAPI(
        title="LunaLoop API",
        description=(
            "Personal cycle tracking — daily logs, phase and period "
            "prediction, analytics, and streaks, points and badges."
        ),
        version=app_settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- Health check (outside the v1 prefix, always at /health) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    v1_prefix = "/api/v1"

    app.include_router(logs.router, prefix=v1_prefix)
    app.include_router(cycle.router, prefix=v1_prefix)
    app.include_router(stats.router, prefix=v1_prefix)
    app.include_router(settings.router, prefix=v1_prefix)
    app.include_router(insight.router, prefix=v1_prefix)

    return app


app = create_app()
