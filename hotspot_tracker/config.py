"""Application configuration loaded from environment variables."""

from __future__ import annotations

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "hotspot-tracker"
    debug: bool = False
    log_level: str = "INFO"

    # Clustering
    eps_km: float = 10.0
    min_pts: int = 4
    include_noise_as_single_events: bool = True

    # Identity & retention
    max_match_km: float = 25.0
    keep_stale_hours: float = 72.0
    history_cap: int = 40
    duplicate_window_seconds: float = 30.0

    # Display labels
    max_place_lookups: int = 35

    # Persistence (None → in-memory)
    store_dir: Optional[str] = None

    # Notifications
    notification_title: str = "Hotspot Alert"
    notification_url: str = "/"

    model_config = {"env_prefix": "HOTSPOT_"}


settings = Settings()
