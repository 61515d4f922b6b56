"""Dense linear system solver used by the polynomial trendline fit."""

from __future__ import annotations

from typing import Sequence

import numpy as np


PIVOT_TOLERANCE = 1e-10


class SingularMatrixError(Exception):
    """Raised when elimination meets a pivot smaller than ``PIVOT_TOLERANCE``."""


def solve_linear_system(
    matrix: Sequence[Sequence[float]],
    rhs: Sequence[float],
) -> list[float]:
    """Solve ``A x = B`` by Gaussian elimination with partial pivoting.

    At each column the row holding the largest absolute value at or below the
    diagonal is swapped into place. If that pivot is still below
    ``PIVOT_TOLERANCE`` the system is treated as singular. The inputs are
    copied and never modified.
    """

    a = np.array(matrix, dtype=np.float64)
    b = np.array(rhs, dtype=np.float64)
    if a.ndim != 2 or a.shape[0] == 0 or a.shape[0] != a.shape[1]:
        raise ValueError("matrix must be square and non-empty")
    size = a.shape[0]
    if b.shape != (size,):
        raise ValueError("rhs length must match matrix size")

    augmented = np.column_stack([a, b])

    for col in range(size):
        pivot_row = col + int(np.argmax(np.abs(augmented[col:, col])))
        if pivot_row != col:
            augmented[[col, pivot_row]] = augmented[[pivot_row, col]]

        pivot = augmented[col, col]
        if abs(pivot) < PIVOT_TOLERANCE:
            raise SingularMatrixError(
                f"pivot {pivot:.3e} in column {col} is below tolerance"
            )

        for row in range(col + 1, size):
            factor = augmented[row, col] / pivot
            augmented[row, col:] -= factor * augmented[col, col:]

    solution = np.zeros(size, dtype=np.float64)
    for row in range(size - 1, -1, -1):
        residual = augmented[row, size] - np.dot(augmented[row, row + 1:size], solution[row + 1:])
        solution[row] = residual / augmented[row, row]

    return [float(value) for value in solution]
