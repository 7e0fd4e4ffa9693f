"""
MoodMap Configuration
=====================
All environment variables in one place. Pydantic Settings validates
types at startup so a bad rate limit or radius fails on boot rather
than on the first request.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Loaded from environment variables or a .env file."""

    # --- App settings ---
    app_name: str = "MoodMap"
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # Optional JSON document with {"moods": [...], "hugRequests": [...]}
    # loaded once at startup. Missing or malformed files are ignored.
    seed_data_path: Optional[str] = "seed-data.json"

    # --- Rate limits (per user, sliding window) ---
    rate_limit_window_seconds: int = 3600
    mood_checkins_per_window: int = 20
    support_requests_per_window: int = 3

    # --- Support requests ---
    default_request_radius_miles: float = 3
    default_search_radius_miles: float = 5
    support_request_ttl_minutes: int = 30
    # Flavour only: marks roughly 30% of new requests as coming from a
    # verified volunteer area. Not a trust signal.
    verified_volunteer_probability: float = 0.3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
