"""Geometry used to draw a factor graph: points and rotations of its parts."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from slamgraph.factor import Factor, FactorType
from slamgraph.variable import Variable, VariableType

_FACTORS_2D = (FactorType.POSITION_2D, FactorType.ODOMETRY_2D, FactorType.OBSERVATION_2D)
_VARIABLES_3D = (VariableType.VEHICLE_3D, VariableType.LANDMARK_3D)


def variable_point(variable: Variable) -> np.ndarray:
    """Position of a variable in space; 2D variables lie in the plane z = 0."""
    content = variable.content
    z = content[2] if variable.variable_type in _VARIABLES_3D else 0.0
    return np.array([content[0], content[1], z], dtype=np.float32)


def factor_point(factor: Factor) -> np.ndarray:
    """Position part of a factor's constraint, with z = 0 for 2D factors."""
    constraint = factor.constraint
    z = 0.0 if factor.factor_type in _FACTORS_2D else constraint[2]
    return np.array([constraint[0], constraint[1], z], dtype=np.float32)


def rotation_from_2d(content: Sequence[float]) -> np.float32:
    """Rotation angle of a 2D pose ``[x, y, phi]``."""
    return np.float32(content[2])


def rotation_from_3d(content: Sequence[float]) -> np.ndarray:
    """Normalized quaternion ``[qx, qy, qz, qw]`` of a 3D pose."""
    quaternion = np.array(content[3:7], dtype=np.float32)
    return quaternion / np.linalg.norm(quaternion)


def _quaternion_matrix(quaternion: np.ndarray) -> np.ndarray:
    x, y, z, w = quaternion
    return np.array(
        [
            [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
            [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
            [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
        ],
        dtype=np.float32,
    )


def _z_rotation_matrix(angle: float) -> np.ndarray:
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]], dtype=np.float32)


def measurement_point(factor: Factor, source: Variable) -> np.ndarray:
    """Where a factor places its measurement in world coordinates.

    Position factors are absolute; the others are relative to the source pose.
    """
    point = factor_point(factor)
    factor_type = factor.factor_type
    if factor_type in (FactorType.POSITION_2D, FactorType.POSITION_3D):
        return point
    if factor_type in (FactorType.ODOMETRY_2D, FactorType.OBSERVATION_2D):
        rotation = _z_rotation_matrix(rotation_from_2d(source.content))
    else:
        rotation = _quaternion_matrix(rotation_from_3d(source.content))
    return (variable_point(source) + rotation @ point).astype(np.float32)