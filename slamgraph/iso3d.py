"""Rigid 3D transformations and the gradients used by the 3D factors."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np


def _normalize(quaternion: np.ndarray) -> np.ndarray:
    return quaternion / np.linalg.norm(quaternion)


def _quaternion_product(p: np.ndarray, q: np.ndarray) -> np.ndarray:
    """Hamilton product of two quaternions stored as ``[x, y, z, w]``."""
    px, py, pz, pw = p
    qx, qy, qz, qw = q
    return np.array(
        [
            pw * qx + px * qw + py * qz - pz * qy,
            pw * qy - px * qz + py * qw + pz * qx,
            pw * qz + px * qy - py * qx + pz * qw,
            pw * qw - px * qx - py * qy - pz * qz,
        ]
    )


@dataclass(frozen=True, eq=False)
class Isometry3:
    """A rotation followed by a translation.

    ``rotation`` is a unit quaternion stored as ``[x, y, z, w]``. Compose two
    isometries, or apply one to a point, with ``@``.
    """

    translation: np.ndarray
    rotation: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "translation", np.asarray(self.translation, dtype=float).reshape(3)
        )
        object.__setattr__(self, "rotation", np.asarray(self.rotation, dtype=float).reshape(4))

    def inverse(self) -> Isometry3:
        """The isometry undoing this one."""
        conjugate = self.rotation * np.array([-1.0, -1.0, -1.0, 1.0])
        inverse_rotation = Isometry3(np.zeros(3), conjugate).rotation_matrix()
        return Isometry3(-(inverse_rotation @ self.translation), conjugate)

    def rotation_matrix(self) -> np.ndarray:
        """The 3x3 rotation matrix of the isometry's quaternion."""
        x, y, z, w = self.rotation
        ww, xx, yy, zz = w * w, x * x, y * y, z * z
        return np.array(
            [
                [ww + xx - yy - zz, 2 * (x * y - w * z), 2 * (x * z + w * y)],
                [2 * (x * y + w * z), ww - xx + yy - zz, 2 * (y * z - w * x)],
                [2 * (x * z - w * y), 2 * (y * z + w * x), ww - xx - yy + zz],
            ]
        )

    def quaternion_xyzw(self) -> np.ndarray:
        """A copy of the rotation quaternion as ``[x, y, z, w]``."""
        return self.rotation.copy()

    def __matmul__(self, other: Isometry3 | Sequence[float] | np.ndarray) -> Isometry3 | np.ndarray:
        if isinstance(other, Isometry3):
            return Isometry3(
                self.translation + self.rotation_matrix() @ other.translation,
                _quaternion_product(self.rotation, other.rotation),
            )
        point = np.asarray(other, dtype=float)
        if point.shape != (3,):
            raise ValueError(f"cannot apply an isometry to an array of shape {point.shape}")
        return self.rotation_matrix() @ point + self.translation


def calc_dq_dr(matrix: np.ndarray) -> np.ndarray:
    """Derivative (3x9) of a quaternion's vector part by its rotation matrix.

    Valid for rotations with a positive trace.
    """
    m = np.asarray(matrix, dtype=float)
    trace = m[0, 0] + m[1, 1] + m[2, 2]
    sin = np.sqrt(trace + 1.0) * 0.5
    factor = -0.03125 / (sin * sin * sin)
    a1 = (m[2, 1] - m[1, 2]) * factor
    a2 = (m[0, 2] - m[2, 0]) * factor
    a3 = (m[1, 0] - m[0, 1]) * factor
    b = 0.25 / sin
    columns = [
        [a1, a2, a3],
        [0.0, 0.0, b],
        [0.0, -b, 0.0],
        [0.0, 0.0, -b],
        [a1, a2, a3],
        [b, 0.0, 0.0],
        [0.0, b, 0.0],
        [-b, 0.0, 0.0],
        [a1, a2, a3],
    ]
    return np.array(columns).T


def skew_trans(translation: Sequence[float] | np.ndarray) -> np.ndarray:
    """Transposed skew-symmetric matrix of twice the given vector."""
    d0, d1, d2 = 2.0 * np.asarray(translation, dtype=float).reshape(3)
    return np.array(
        [
            [0.0, d2, -d1],
            [-d2, 0.0, d0],
            [d1, -d0, 0.0],
        ]
    )


def _stacked_parts(matrix: np.ndarray, mult: np.ndarray, transpose: bool) -> np.ndarray:
    m = np.asarray(matrix, dtype=float)
    mult = np.asarray(mult, dtype=float)
    parts = []
    for column in m.T:
        skew = skew_trans(column)
        parts.append(mult @ (skew.T if transpose else skew))
    return np.vstack(parts)


def skew_matr_and_mult_parts(matrix: np.ndarray, mult: np.ndarray) -> np.ndarray:
    """Stack (9x3) of ``mult @ skew_trans(column)`` for each column of ``matrix``."""
    return _stacked_parts(matrix, mult, transpose=False)


def skew_matr_t_and_mult_parts(matrix: np.ndarray, mult: np.ndarray) -> np.ndarray:
    """Stack (9x3) of ``mult @ skew_trans(column).T`` for each column of ``matrix``."""
    return _stacked_parts(matrix, mult, transpose=True)


def get_isometry(pose: Sequence[float]) -> Isometry3:
    """Isometry of a pose ``[x, y, z, qx, qy, qz, qw]``, quaternion normalized."""
    values = np.asarray(pose, dtype=float)
    return Isometry3(values[0:3], _normalize(values[3:7]))


def get_isometry_normalized(pose: Sequence[float]) -> Isometry3:
    """Isometry of a correction ``[x, y, z, qx, qy, qz]`` with implied ``qw = 1``."""
    values = np.asarray(pose, dtype=float)
    quaternion = np.array([values[3], values[4], values[5], 1.0])
    return Isometry3(values[0:3], _normalize(quaternion))