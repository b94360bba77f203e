"""Contributions of the 2D factors to the linear system ``H dx = -b``.

Each function adds its factor's terms to ``H`` and ``b`` in place, skipping
the blocks of fixed variables.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from slamgraph.factor import Factor
from slamgraph.variable import Variable


def _rot2(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, -s], [s, c]])


def _rot_z(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def _accumulate(
    H: np.ndarray,
    b: np.ndarray,
    jacobian: np.ndarray,
    information: np.ndarray,
    error: np.ndarray,
    variables: Sequence[Variable],
) -> None:
    right_mult = information @ jacobian
    h_update = jacobian.T @ right_mult
    b_update = error @ right_mult

    blocks = []
    offset = 0
    for variable in variables:
        size = variable.variable_type.dimension
        blocks.append((variable.fixed_range, slice(offset, offset + size)))
        offset += size

    for row_range, row_part in blocks:
        if row_range is None:
            continue
        rows = slice(row_range.start, row_range.stop)
        b[rows] += b_update[row_part]
        for col_range, col_part in blocks:
            if col_range is None:
                continue
            cols = slice(col_range.start, col_range.stop)
            H[rows, cols] += h_update[row_part, col_part]


def update_pos2d(H: np.ndarray, b: np.ndarray, factor: Factor, var: Variable) -> None:
    """Add a Position2D factor on a 2D vehicle."""
    if var.is_fixed:
        return
    pos_v = np.asarray(var.content[:2], dtype=float)
    rot_v = var.content[2]
    pos_m = np.asarray(factor.constraint[:2], dtype=float)
    rot_m = factor.constraint[2]

    jacobian = _rot_z(-rot_m)

    err_pos = _rot2(-rot_m) @ (pos_v - pos_m)
    err_rot = rot_v - rot_m
    if err_rot > math.pi:
        err_rot -= 2.0 * math.pi
    elif err_rot < -math.pi:
        err_rot += 2.0 * math.pi
    error = np.array([err_pos[0], err_pos[1], err_rot])
    _accumulate(H, b, jacobian, factor.information_matrix, error, [var])


def update_odo2d(
    H: np.ndarray, b: np.ndarray, factor: Factor, var_i: Variable, var_j: Variable
) -> None:
    """Add an Odometry2D factor between two 2D vehicles."""
    pos_i = np.asarray(var_i.content[:2], dtype=float)
    rot_i = var_i.content[2]
    pos_j = np.asarray(var_j.content[:2], dtype=float)
    rot_j = var_j.content[2]
    pos_ij = np.asarray(factor.constraint[:2], dtype=float)
    rot_ij = factor.constraint[2]

    r_ij_t = _rot_z(-rot_ij)
    dx, dy = pos_j - pos_i
    sin_i, cos_i = math.sin(rot_i), math.cos(rot_i)
    last_column_top = -sin_i * dx + cos_i * dy
    last_column_mid = -cos_i * dx - sin_i * dy
    local_i = np.array(
        [
            [-cos_i, -sin_i, last_column_top],
            [sin_i, -cos_i, last_column_mid],
            [0.0, 0.0, -1.0],
        ]
    )
    jacobian = np.hstack([r_ij_t @ local_i, r_ij_t @ _rot_z(-rot_i)])

    err_pos = _rot2(-rot_ij) @ (_rot2(-rot_i) @ (pos_j - pos_i) - pos_ij)
    err_rot = rot_j - rot_i - rot_ij
    if err_rot >= math.pi:
        err_rot -= 2.0 * math.pi
    elif err_rot < -math.pi:
        err_rot += 2.0 * math.pi
    error = np.array([err_pos[0], err_pos[1], err_rot])
    _accumulate(H, b, jacobian, factor.information_matrix, error, [var_i, var_j])


def update_obs2d(
    H: np.ndarray, b: np.ndarray, factor: Factor, var_i: Variable, var_j: Variable
) -> None:
    """Add an Observation2D factor from a 2D vehicle to a 2D landmark."""
    pos_i = np.asarray(var_i.content[:2], dtype=float)
    rot_i = var_i.content[2]
    pos_j = np.asarray(var_j.content[:2], dtype=float)
    pos_ij = np.asarray(factor.constraint[:2], dtype=float)

    dx, dy = pos_j - pos_i
    sin_i, cos_i = math.sin(rot_i), math.cos(rot_i)
    mid_col_top = -sin_i * dx + cos_i * dy
    mid_col_bot = -cos_i * dx - sin_i * dy
    jacobian = np.array(
        [
            [-cos_i, -sin_i, mid_col_top, cos_i, sin_i],
            [sin_i, -cos_i, mid_col_bot, -sin_i, cos_i],
        ]
    )

    error = _rot2(-rot_i) @ (pos_j - pos_i) - pos_ij
    _accumulate(H, b, jacobian, factor.information_matrix, error, [var_i, var_j])