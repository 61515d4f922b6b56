"""Domain-level validation rules for forecast configuration."""

from __future__ import annotations

from dataclasses import dataclass


SUPPORTED_TRENDLINE_DEGREES = (1, 2, 3)


class ForecastConfigurationError(ValueError):
    """Raised when a forecast configuration is malformed."""


@dataclass(frozen=True)
class ForecastConfig:
    window_size: int = 3
    alpha: float = 0.3
    trendline_degree: int = 1


def validate_forecast_config(config: ForecastConfig) -> None:
    if isinstance(config.window_size, bool) or not isinstance(config.window_size, int):
        raise ForecastConfigurationError("window_size must be an integer")
    if config.window_size < 1:
        raise ForecastConfigurationError("window_size must be >= 1")
    if not 0.0 < config.alpha < 1.0:
        raise ForecastConfigurationError("alpha must be in (0, 1)")
    if isinstance(config.trendline_degree, bool) or not isinstance(config.trendline_degree, int):
        raise ForecastConfigurationError("trendline_degree must be an integer")
    if config.trendline_degree not in SUPPORTED_TRENDLINE_DEGREES:
        raise ForecastConfigurationError(
            f"trendline_degree must be one of {SUPPORTED_TRENDLINE_DEGREES}"
        )
