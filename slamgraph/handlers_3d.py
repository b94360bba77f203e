"""Contributions of the 3D factors to the linear system ``H dx = -b``.

Each function adds its factor's terms to ``H`` and ``b`` in place, skipping
the blocks of fixed variables.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from slamgraph.factor import Factor
from slamgraph.iso3d import (
    calc_dq_dr,
    get_isometry,
    skew_matr_and_mult_parts,
    skew_matr_t_and_mult_parts,
    skew_trans,
)
from slamgraph.variable import Variable


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


def _error_vector(translation: np.ndarray, quaternion: np.ndarray) -> np.ndarray:
    return np.concatenate([translation, quaternion[:3]])


def update_pos3d(H: np.ndarray, b: np.ndarray, factor: Factor, var: Variable) -> None:
    """Add a Position3D factor on a 3D vehicle."""
    if var.is_fixed:
        return
    iso_v = get_isometry(var.content)
    iso_m = get_isometry(factor.constraint)

    err = iso_m.inverse() @ iso_v
    err_rot = err.rotation_matrix()
    dq_dr = calc_dq_dr(err_rot)
    jacobian = np.zeros((6, 6))
    jacobian[:3, :3] = err_rot
    jacobian[3:, 3:] = dq_dr @ skew_matr_and_mult_parts(np.eye(3), err_rot)

    error = _error_vector(err.translation, err.quaternion_xyzw())
    _accumulate(H, b, jacobian, factor.information_matrix, error, [var])


def update_odo3d(
    H: np.ndarray, b: np.ndarray, factor: Factor, var_i: Variable, var_j: Variable
) -> None:
    """Add an Odometry3D factor between two 3D vehicles."""
    iso_i = get_isometry(var_i.content)
    iso_j = get_isometry(var_j.content)
    iso_ij = get_isometry(factor.constraint)

    a_ij = iso_ij.inverse()
    b_ij = iso_i.inverse() @ iso_j
    err_ij = a_ij @ b_ij
    a_rot = a_ij.rotation_matrix()
    b_rot = b_ij.rotation_matrix()
    err_rot = err_ij.rotation_matrix()
    dq_dr = calc_dq_dr(err_rot)

    jacobian_i = np.zeros((6, 6))
    jacobian_j = np.zeros((6, 6))
    jacobian_i[:3, :3] = -a_rot
    jacobian_j[:3, :3] = err_rot
    jacobian_i[:3, 3:] = a_rot @ skew_trans(b_ij.translation).T
    jacobian_i[3:, 3:] = dq_dr @ skew_matr_t_and_mult_parts(b_rot, a_rot)
    jacobian_j[3:, 3:] = dq_dr @ skew_matr_and_mult_parts(np.eye(3), err_rot)
    jacobian = np.hstack([jacobian_i, jacobian_j])

    err = (a_ij @ iso_i.inverse()) @ iso_j
    error = _error_vector(err.translation, err.quaternion_xyzw())
    _accumulate(H, b, jacobian, factor.information_matrix, error, [var_i, var_j])


def update_obs3d(
    H: np.ndarray, b: np.ndarray, factor: Factor, var_i: Variable, var_j: Variable
) -> None:
    """Add an Observation3D factor from a 3D vehicle to a 3D landmark."""
    iso_i = get_isometry(var_i.content)
    inverse_i = iso_i.inverse()
    local_j = inverse_i @ np.asarray(var_j.content[:3], dtype=float)
    pos_ij = np.asarray(factor.constraint[:3], dtype=float)

    jacobian = np.zeros((3, 9))
    jacobian[:, 0:3] = -np.eye(3)
    jacobian[:, 3:6] = skew_trans(local_j).T
    jacobian[:, 6:9] = inverse_i.rotation_matrix()

    error = local_j - pos_ij
    _accumulate(H, b, jacobian, factor.information_matrix, error, [var_i, var_j])