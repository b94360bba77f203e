"""Assembly of the linear system solved in each optimization step."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np

from slamgraph.factor import Factor, FactorType
from slamgraph.graph import FactorGraph
from slamgraph.handlers_2d import update_obs2d, update_odo2d, update_pos2d
from slamgraph.handlers_3d import update_obs3d, update_odo3d, update_pos3d
from slamgraph.variable import Variable, VariableType

_UNARY: dict[FactorType, tuple[Callable[..., None], VariableType]] = {
    FactorType.POSITION_2D: (update_pos2d, VariableType.VEHICLE_2D),
    FactorType.POSITION_3D: (update_pos3d, VariableType.VEHICLE_3D),
}

_BINARY: dict[FactorType, tuple[Callable[..., None], VariableType, VariableType]] = {
    FactorType.ODOMETRY_2D: (update_odo2d, VariableType.VEHICLE_2D, VariableType.VEHICLE_2D),
    FactorType.OBSERVATION_2D: (update_obs2d, VariableType.VEHICLE_2D, VariableType.LANDMARK_2D),
    FactorType.ODOMETRY_3D: (update_odo3d, VariableType.VEHICLE_3D, VariableType.VEHICLE_3D),
    FactorType.OBSERVATION_3D: (update_obs3d, VariableType.VEHICLE_3D, VariableType.LANDMARK_3D),
}


def _update(H: np.ndarray, b: np.ndarray, factor: Factor, source: Variable, target: Variable) -> None:
    factor_type = factor.factor_type
    if factor_type in _UNARY:
        handler, source_type = _UNARY[factor_type]
        if source.variable_type is source_type:
            handler(H, b, factor, source)
            return
    elif factor_type in _BINARY:
        handler, source_type, target_type = _BINARY[factor_type]
        if source.variable_type is source_type and target.variable_type is target_type:
            handler(H, b, factor, source, target)
            return
    raise ValueError(
        f"No valid edge: {factor_type.value} from {source.variable_type.value} "
        f"to {target.variable_type.value}"
    )


def calculate_h_b(factor_graph: FactorGraph) -> tuple[np.ndarray, np.ndarray]:
    """Build the system matrix ``H`` and gradient vector ``b`` of the graph.

    Raises ValueError for a factor that does not fit the variables it joins.
    """
    dim = factor_graph.matrix_dim
    H = np.zeros((dim, dim))
    b = np.zeros(dim)
    for index in range(len(factor_graph)):
        source = factor_graph.get_var(index)
        for target_index, factor in factor_graph.factors_from(index):
            _update(H, b, factor, source, factor_graph.get_var(target_index))
    return H, b