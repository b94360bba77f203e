"""Gauss-Newton refinement of the variable estimates of a factor graph."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from slamgraph.graph import FactorGraph
from slamgraph.iso3d import get_isometry, get_isometry_normalized
from slamgraph.linear_system import calculate_h_b
from slamgraph.solver import solve
from slamgraph.variable import Variable, VariableType


def optimize(graph: FactorGraph, iterations: int) -> None:
    """Improve the graph's variables in place with the given number of iterations.

    Raises NotPositiveDefiniteError when a step's system cannot be solved.
    """
    for _ in range(iterations):
        _update_once(graph)


def _update_once(graph: FactorGraph) -> None:
    H, b = calculate_h_b(graph)
    solution = solve(H, -b)
    for variable in graph.variables:
        update_var(variable, solution)


def _wrap_angle(angle: float) -> float:
    angle = math.fmod(angle, 2.0 * math.pi)
    if angle > math.pi:
        angle -= 2.0 * math.pi
    elif angle < -math.pi:
        angle += 2.0 * math.pi
    return angle


def update_var(var: Variable, solution: Sequence[float] | np.ndarray) -> None:
    """Apply the part of ``solution`` owned by ``var``; fixed variables stay as they are."""
    if var.fixed_range is None:
        return
    correction = np.asarray(solution, dtype=float)[var.fixed_range.start : var.fixed_range.stop]

    if var.variable_type is VariableType.VEHICLE_3D:
        new_iso = get_isometry(var.content) @ get_isometry_normalized(correction)
        updated = [*new_iso.translation.tolist(), *new_iso.quaternion_xyzw().tolist()]
    else:
        updated = [old + cor for old, cor in zip(var.content, correction.tolist())]
        if var.variable_type is VariableType.VEHICLE_2D:
            updated[2] = _wrap_angle(updated[2])
    var.set_content(updated)