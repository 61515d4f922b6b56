"""Least-squares trendlines and goodness-of-fit for booking-count series."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from backend.domain.constraints import SUPPORTED_TRENDLINE_DEGREES, ForecastConfigurationError
from backend.domain.models import RegressionModel
from backend.services.linear_system import SingularMatrixError, solve_linear_system
from backend.utils.logger import get_logger


logger = get_logger(__name__)


POLYNOMIAL_MIN_POINTS = 3


def _time_index(size: int, xs: Optional[Sequence[float]]) -> np.ndarray:
    if xs is None:
        return np.arange(size, dtype=np.float64)
    x = np.asarray(xs, dtype=np.float64)
    if x.shape != (size,):
        raise ValueError("xs and values must have the same length")
    return x


def fit_linear(
    values: Sequence[float],
    xs: Optional[Sequence[float]] = None,
) -> RegressionModel:
    """Ordinary least-squares line of ``values`` against the time index.

    With fewer than two points there is nothing to fit: the model is the
    constant first value (0.0 for an empty series), which reproduces the input.
    If every x is identical the slope is undefined and the mean is used.
    """
    y = np.asarray(values, dtype=np.float64)
    n = y.shape[0]
    if n == 0:
        return RegressionModel(degree=1, coefficients=(0.0, 0.0))
    if n < 2:
        return RegressionModel(degree=1, coefficients=(float(y[0]), 0.0))

    x = _time_index(n, xs)
    x_mean = float(x.mean())
    y_mean = float(y.mean())
    x_dev = x - x_mean
    denominator = float(np.sum(x_dev**2))
    if denominator == 0.0:
        return RegressionModel(degree=1, coefficients=(y_mean, 0.0))

    slope = float(np.sum(x_dev * (y - y_mean))) / denominator
    intercept = y_mean - slope * x_mean
    return RegressionModel(degree=1, coefficients=(intercept, slope))


def linear_regression(values: Sequence[float]) -> list[float]:
    """Fitted line evaluated at ``x = 0..n-1``; short series are echoed back."""
    if len(values) < 2:
        return [float(value) for value in values]
    model = fit_linear(values)
    return model.evaluate_many(range(len(values)))


def build_normal_equations(
    xs: Sequence[float],
    ys: Sequence[float],
    degree: int,
) -> tuple[list[list[float]], list[float]]:
    """Normal equations ``A c = B`` with ``A[i][j] = Σx^(i+j)``, ``B[i] = Σx^i·y``."""
    x = np.asarray(xs, dtype=np.float64)
    y = np.asarray(ys, dtype=np.float64)
    power_sums = [float(np.sum(x**power)) for power in range(2 * degree + 1)]
    matrix = [
        [power_sums[row + col] for col in range(degree + 1)]
        for row in range(degree + 1)
    ]
    rhs = [float(np.sum((x**row) * y)) for row in range(degree + 1)]
    return matrix, rhs


def fit_polynomial(
    xs: Sequence[float],
    ys: Sequence[float],
    degree: int,
) -> RegressionModel:
    """Least-squares polynomial of degree 2 or 3.

    Falls back to the linear fit when there are too few points for the
    requested degree or the normal equations are singular.
    """
    if degree not in (2, 3):
        raise ValueError("polynomial degree must be 2 or 3")
    if len(xs) != len(ys):
        raise ValueError("xs and ys must have the same length")

    n = len(ys)
    if n < POLYNOMIAL_MIN_POINTS or n <= degree:
        logger.debug(
            "Polynomial fit skipped | degree=%s | points=%s | using linear fit",
            degree,
            n,
        )
        return fit_linear(ys, xs)

    matrix, rhs = build_normal_equations(xs, ys, degree)
    try:
        coefficients = solve_linear_system(matrix, rhs)
    except SingularMatrixError as exc:
        logger.warning(
            "Polynomial fit fell back to linear | degree=%s | points=%s | reason=%s",
            degree,
            n,
            exc,
        )
        return fit_linear(ys, xs)

    return RegressionModel(degree=degree, coefficients=tuple(coefficients))


def polynomial_regression(
    xs: Sequence[float],
    ys: Sequence[float],
    degree: int,
) -> list[float]:
    if len(ys) < POLYNOMIAL_MIN_POINTS:
        return linear_regression(ys)
    model = fit_polynomial(xs, ys, degree)
    return model.evaluate_many(xs)


def fit_trendline(values: Sequence[float], degree: int) -> RegressionModel:
    """Dispatch to the linear or polynomial fit over ``x = 0..n-1``."""
    if degree not in SUPPORTED_TRENDLINE_DEGREES:
        raise ForecastConfigurationError(
            f"trendline_degree must be one of {SUPPORTED_TRENDLINE_DEGREES}"
        )
    if degree == 1:
        return fit_linear(values)
    return fit_polynomial(list(range(len(values))), values, degree)


def r_squared(
    actual: Sequence[float],
    predicted: Sequence[Optional[float]],
) -> float:
    """Coefficient of determination over pairs with a defined prediction.

    Fewer than two usable pairs gives 0.0; a flat actual series gives 1.0.
    The result is clamped to ``[0, 1]``.
    """
    if len(actual) != len(predicted):
        raise ValueError("actual and predicted must have the same length")

    pairs = [
        (float(observed), float(estimate))
        for observed, estimate in zip(actual, predicted)
        if estimate is not None
    ]
    if len(pairs) < 2:
        return 0.0

    y = np.array([observed for observed, _ in pairs], dtype=np.float64)
    f = np.array([estimate for _, estimate in pairs], dtype=np.float64)
    ss_res = float(np.sum((y - f) ** 2))
    ss_tot = float(np.sum((y - y.mean()) ** 2))
    if ss_tot == 0.0:
        return 1.0
    return max(0.0, min(1.0, 1.0 - ss_res / ss_tot))
