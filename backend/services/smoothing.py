"""Moving-average and exponential smoothing over daily booking counts."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import pandas as pd


DEFAULT_WINDOW_SIZE = 3
DEFAULT_ALPHA = 0.3


def moving_average(
    values: Sequence[float],
    window: int = DEFAULT_WINDOW_SIZE,
) -> list[Optional[float]]:
    """Trailing mean of ``window`` values; ``None`` until the window is full."""
    if window < 1:
        raise ValueError("window must be >= 1")
    if not values:
        return []

    rolled = (
        pd.Series(values, dtype="float64")
        .rolling(window=window, min_periods=window)
        .mean()
    )
    return [None if np.isnan(value) else float(value) for value in rolled]


def moving_average_forecast(
    values: Sequence[float],
    window: int = DEFAULT_WINDOW_SIZE,
) -> float:
    """Next-period estimate: mean of the last ``min(window, n)`` values.

    Short series average whatever is available; an empty series yields 0.0.
    """
    if window < 1:
        raise ValueError("window must be >= 1")
    if not values:
        return 0.0
    tail = np.asarray(values[-window:], dtype=np.float64)
    return float(tail.mean())


def exponential_smoothing(
    values: Sequence[float],
    alpha: float = DEFAULT_ALPHA,
) -> list[float]:
    """Return ``n + 1`` smoothed levels; the last one forecasts the next period.

    ``S[0]`` is anchored at the first observation and
    ``S[t] = alpha * values[t - 1] + (1 - alpha) * S[t - 1]``.
    """
    if not 0.0 < alpha < 1.0:
        raise ValueError("alpha must be in (0, 1)")
    if not values:
        return []

    levels = [float(values[0])]
    for observed in values:
        levels.append(alpha * float(observed) + (1.0 - alpha) * levels[-1])
    return levels
