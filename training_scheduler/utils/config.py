"""Runtime configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    app_name: str = "Training Session Allocation Engine"
    app_version: str = "1.0.0"
    log_level: str = "INFO"
    schedule_day_start: str = "08:00"
    same_type_buffer_factor: float = 0.5
    local_search_max_passes: int = 50
    default_team_size: int = 20


def validate_settings(settings: Settings) -> None:
    parts = settings.schedule_day_start.split(":")
    if len(parts) != 2 or not all(part.isdigit() for part in parts):
        raise ValueError("schedule_day_start must follow HH:MM format")
    hours, minutes = (int(part) for part in parts)
    if not 0 <= hours <= 23 or not 0 <= minutes <= 59:
        raise ValueError("schedule_day_start boundaries are invalid")
    if not 0.0 <= settings.same_type_buffer_factor <= 1.0:
        raise ValueError("same_type_buffer_factor must be between 0 and 1")
    if settings.local_search_max_passes < 0:
        raise ValueError("local_search_max_passes must be >= 0")
    if settings.default_team_size <= 0:
        raise ValueError("default_team_size must be > 0")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; call ``get_settings.cache_clear()`` to reload."""
    settings = Settings(
        app_name=_env_str("SCHEDULER_APP_NAME", Settings.app_name),
        app_version=_env_str("SCHEDULER_APP_VERSION", Settings.app_version),
        log_level=_env_str("SCHEDULER_LOG_LEVEL", Settings.log_level),
        schedule_day_start=_env_str("SCHEDULER_DAY_START", Settings.schedule_day_start),
        same_type_buffer_factor=_env_float(
            "SCHEDULER_SAME_TYPE_BUFFER_FACTOR",
            Settings.same_type_buffer_factor,
        ),
        local_search_max_passes=_env_int(
            "SCHEDULER_LOCAL_SEARCH_MAX_PASSES",
            Settings.local_search_max_passes,
        ),
        default_team_size=_env_int(
            "SCHEDULER_DEFAULT_TEAM_SIZE",
            Settings.default_team_size,
        ),
    )
    validate_settings(settings)
    return settings
