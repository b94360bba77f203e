"""Solving the symmetric positive-definite linear systems of the optimizer."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np


class NotPositiveDefiniteError(ValueError):
    """Raised when the system matrix has no Cholesky decomposition."""


def _solve_lower(lower: np.ndarray, rhs: np.ndarray) -> np.ndarray:
    """Forward substitution for a lower triangular matrix."""
    result = np.zeros_like(rhs)
    for row, (coefficients, value) in enumerate(zip(lower, rhs)):
        result[row] = (value - coefficients[:row] @ result[:row]) / coefficients[row]
    return result


def _solve_upper(upper: np.ndarray, rhs: np.ndarray) -> np.ndarray:
    """Back substitution for an upper triangular matrix."""
    size = rhs.shape[0]
    result = np.zeros_like(rhs)
    for row in reversed(range(size)):
        coefficients = upper[row]
        tail = coefficients[row + 1 :] @ result[row + 1 :]
        result[row] = (rhs[row] - tail) / coefficients[row]
    return result


def solve(H: np.ndarray | Sequence[Sequence[float]], b: np.ndarray | Sequence[float]) -> np.ndarray:
    """Solve ``H x = b`` by a Cholesky decomposition of ``H``.

    ``H`` is assumed to be symmetric; only its lower triangle is used.
    Raises NotPositiveDefiniteError if ``H`` is not positive-definite and
    ValueError if the dimensions of ``H`` and ``b`` do not fit.
    """
    matrix = np.asarray(H, dtype=float)
    rhs = np.asarray(b, dtype=float)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise ValueError(f"incompatible dimension: H of shape {matrix.shape} is not square")
    if rhs.ndim != 1 or rhs.shape[0] != matrix.shape[0]:
        raise ValueError(
            f"incompatible dimension: H of shape {matrix.shape} and b of shape {rhs.shape}"
        )
    if matrix.shape[0] == 0:
        return np.zeros(0)
    try:
        lower = np.linalg.cholesky(matrix)
    except np.linalg.LinAlgError:
        raise NotPositiveDefiniteError("H is not positive-definite") from None
    if not np.all(np.isfinite(lower)):
        raise NotPositiveDefiniteError("H is not positive-definite")
    return _solve_upper(lower.T, _solve_lower(lower, rhs))