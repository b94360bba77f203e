"""Measurements (factors) connecting variables of a factor graph."""

from __future__ import annotations

import enum
import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np


class FactorType(enum.Enum):
    """Kind of a factor; the value is the name used in serialized models."""

    POSITION_2D = "Position2D"
    ODOMETRY_2D = "Odometry2D"
    OBSERVATION_2D = "Observation2D"
    POSITION_3D = "Position3D"
    ODOMETRY_3D = "Odometry3D"
    OBSERVATION_3D = "Observation3D"

    @property
    def is_unary(self) -> bool:
        """Whether the factor constrains a single variable."""
        return self in (FactorType.POSITION_2D, FactorType.POSITION_3D)


def information_matrix_from_values(values: Sequence[float]) -> np.ndarray:
    """Build a square matrix from values given column by column."""
    flat = np.asarray(values, dtype=float).ravel()
    dim = math.isqrt(flat.size)
    if dim * dim != flat.size:
        raise ValueError(f"{flat.size} values do not form a square matrix")
    return flat.reshape((dim, dim), order="F")


@dataclass
class Factor:
    """A measurement.

    ``constraint`` layouts:
    Position2D/Odometry2D ``[x, y, phi]``, Observation2D ``[x, y]``,
    Position3D/Odometry3D ``[x, y, z, qx, qy, qz, qw]``, Observation3D ``[x, y, z]``.

    ``information_matrix`` is the inverse covariance of the measurement; a flat
    sequence is read column by column.
    """

    factor_type: FactorType
    constraint: list[float]
    information_matrix: np.ndarray

    def __post_init__(self) -> None:
        self.constraint = [float(v) for v in self.constraint]
        matrix = np.asarray(self.information_matrix, dtype=float)
        if matrix.ndim == 1:
            matrix = information_matrix_from_values(matrix)
        elif matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise ValueError(f"information matrix of shape {matrix.shape} is not square")
        self.information_matrix = matrix