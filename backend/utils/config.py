"""Runtime settings loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[2]


@dataclass(frozen=True)
class RoomSeed:
    name: str
    description: str
    price: float


DEFAULT_ROOM_CATALOGUE: tuple[RoomSeed, ...] = (
    RoomSeed(name="Standard Room", description="A cozy room", price=1200.0),
    RoomSeed(name="Deluxe Room", description="Spacious room", price=2000.0),
    RoomSeed(name="Suite", description="Luxury suite with sea view", price=3500.0),
)


@dataclass(frozen=True)
class Settings:
    app_name: str = "Room Demand Forecasting"
    app_version: str = "1.0.0"
    log_level: str = "INFO"
    database_path: Path = PROJECT_ROOT / "data" / "bookings.db"

    forecast_window_size: int = 3
    forecast_alpha: float = 0.3
    forecast_trendline_degree: int = 1

    synthetic_random_seed: int = 42
    synthetic_seed_days: int = 4
    synthetic_max_bookings_per_day: int = 3
    synthetic_start_date: str = "2025-10-25"
    synthetic_rooms: tuple[RoomSeed, ...] = field(default=DEFAULT_ROOM_CATALOGUE)


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


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; call ``cache_clear`` to reload."""
    defaults = Settings()
    database_path = os.getenv("DATABASE_PATH")
    return Settings(
        app_name=os.getenv("APP_NAME", defaults.app_name),
        app_version=os.getenv("APP_VERSION", defaults.app_version),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level),
        database_path=Path(database_path) if database_path else defaults.database_path,
        forecast_window_size=_env_int("FORECAST_WINDOW_SIZE", defaults.forecast_window_size),
        forecast_alpha=_env_float("FORECAST_ALPHA", defaults.forecast_alpha),
        forecast_trendline_degree=_env_int(
            "FORECAST_TRENDLINE_DEGREE",
            defaults.forecast_trendline_degree,
        ),
        synthetic_random_seed=_env_int("SYNTHETIC_RANDOM_SEED", defaults.synthetic_random_seed),
        synthetic_seed_days=_env_int("SYNTHETIC_SEED_DAYS", defaults.synthetic_seed_days),
        synthetic_max_bookings_per_day=_env_int(
            "SYNTHETIC_MAX_BOOKINGS_PER_DAY",
            defaults.synthetic_max_bookings_per_day,
        ),
        synthetic_start_date=os.getenv("SYNTHETIC_START_DATE", defaults.synthetic_start_date),
    )
