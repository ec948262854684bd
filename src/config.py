"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file)."""

    # --- App ---
    app_name: str = "LunaLoop"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"  # development | staging | production

    # --- Storage ---
    data_dir: str = ".lunaloop"  # one JSON file per store key

    # --- Insight service (Anthropic) ---
    anthropic_api_key: str = ""  # empty = offline, fallback insights only
    insight_model: str = "claude-haiku-4-5-20251001"
    insight_max_tokens: int = 120
    insight_timeout_seconds: float = 10.0

    # --- CORS ---
    cors_origins: list[str] = ["http://localhost:3000"]

    # --- Demo data ---
    allow_demo_seed: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "LUNALOOP_"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
