import math

import numpy as np
import pytest

from slamgraph.iso3d import get_isometry
from slamgraph.model import Edge, FactorGraphModel, Vertex, graph_to_model, model_to_graph
from slamgraph.optimizer import optimize, update_var
from slamgraph.solver import NotPositiveDefiniteError
from slamgraph.variable import Variable, VariableType


def _identity(dim):
    return np.eye(dim).flatten().tolist()


def _graph(vertices, edges, fixed=()):
    return model_to_graph(FactorGraphModel(vertices=vertices, edges=edges, fixed_vertices=set(fixed)))


def _same_rotation(q1, q2):
    q1 = np.asarray(q1) / np.linalg.norm(q1)
    q2 = np.asarray(q2) / np.linalg.norm(q2)
    return abs(float(np.dot(q1, q2))) == pytest.approx(1.0, abs=1e-9)


def test_zero_iterations_leave_graph_unchanged():
    vertices = [Vertex(0, "Vehicle2D", [1.0, 0.0, 1.57]), Vertex(1, "Vehicle2D", [0.0, 1.0, 3.14])]
    edges = [Edge("Odometry2D", [0, 1], [1.0, 1.5, 1.57], _identity(3))]
    graph = _graph(vertices, edges, fixed={0})
    before = graph_to_model(graph)
    optimize(graph, 0)
    assert graph_to_model(graph) == before


def test_position2d_reaches_measurement_in_one_step():
    graph = _graph(
        [Vertex(0, "Vehicle2D", [0.5, -0.3, 0.2])],
        [Edge("Position2D", [0], [2.0, 1.0, 0.7], _identity(3))],
    )
    optimize(graph, 1)
    assert graph.get_var(0).content == pytest.approx([2.0, 1.0, 0.7], abs=1e-9)


def test_odometry2d_converges_and_keeps_fixed_vertex():
    graph = _graph(
        [Vertex(0, "Vehicle2D", [0.0, 0.0, 0.0]), Vertex(1, "Vehicle2D", [0.3, 0.1, 0.0])],
        [Edge("Odometry2D", [0, 1], [1.0, 2.0, 0.5], _identity(3))],
        fixed={0},
    )
    optimize(graph, 10)
    assert graph.get_var(0).content == [0.0, 0.0, 0.0]
    assert graph.get_var(1).content == pytest.approx([1.0, 2.0, 0.5], abs=1e-8)


def test_observation2d_places_landmark():
    graph = _graph(
        [Vertex(0, "Vehicle2D", [0.0, 0.0, 0.0]), Vertex(1, "Landmark2D", [5.0, -4.0])],
        [Edge("Observation2D", [0, 1], [1.0, 1.0], _identity(2))],
        fixed={0},
    )
    optimize(graph, 1)
    assert graph.get_var(1).content == pytest.approx([1.0, 1.0], abs=1e-9)


def test_position3d_converges_to_measurement():
    target = [1.0, 2.0, 3.0, 0.0, 0.0, math.sin(0.2), math.cos(0.2)]
    graph = _graph(
        [Vertex(0, "Vehicle3D", [0.1, 0.2, -0.1, 0.0, 0.0, 0.0, 1.0])],
        [Edge("Position3D", [0], target, _identity(6))],
    )
    optimize(graph, 10)
    content = graph.get_var(0).content
    assert content[:3] == pytest.approx(target[:3], abs=1e-6)
    assert _same_rotation(content[3:], target[3:])


def test_odometry3d_converges_to_constraint():
    constraint = [1.0, 0.5, 0.2, 0.0, 0.0, math.sin(0.1), math.cos(0.1)]
    graph = _graph(
        [
            Vertex(0, "Vehicle3D", [0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 1.0]),
            Vertex(1, "Vehicle3D", [0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 1.0]),
        ],
        [Edge("Odometry3D", [0, 1], constraint, _identity(6))],
        fixed={0},
    )
    optimize(graph, 10)
    content = graph.get_var(1).content
    assert content[:3] == pytest.approx(constraint[:3], abs=1e-6)
    assert _same_rotation(content[3:], constraint[3:])


def test_observation3d_places_landmark_in_vehicle_frame():
    pose = [1.0, 2.0, 3.0, 0.0, 0.0, math.sin(math.pi / 4), math.cos(math.pi / 4)]
    graph = _graph(
        [Vertex(0, "Vehicle3D", pose), Vertex(1, "Landmark3D", [0.0, 0.0, 0.0])],
        [Edge("Observation3D", [0, 1], [1.0, 0.0, 0.0], _identity(3))],
        fixed={0},
    )
    optimize(graph, 1)
    expected = get_isometry(pose) @ np.array([1.0, 0.0, 0.0])
    assert graph.get_var(1).content == pytest.approx(expected.tolist(), abs=1e-9)


def test_unconstrained_variable_raises():
    graph = _graph([Vertex(0, "Vehicle2D", [0.0, 0.0, 0.0])], [])
    with pytest.raises(NotPositiveDefiniteError):
        optimize(graph, 1)


def test_update_var_skips_fixed_variable():
    var = Variable(3, VariableType.LANDMARK_2D, [1.0, 2.0], None)
    update_var(var, [10.0, 10.0])
    assert var.content == [1.0, 2.0]


def test_update_var_adds_correction_at_range():
    var = Variable(3, VariableType.LANDMARK_3D, [1.0, 2.0, 3.0], range(2, 5))
    update_var(var, [9.0, 9.0, 0.5, -1.0, 2.0])
    assert var.content == pytest.approx([1.5, 1.0, 5.0])


def test_update_var_wraps_vehicle_angle():
    var = Variable(0, VariableType.VEHICLE_2D, [0.0, 0.0, 3.0], range(0, 3))
    update_var(var, [1.0, 0.0, 0.5])
    assert var.content == pytest.approx([1.0, 0.0, 3.5 - 2.0 * math.pi])
    assert -math.pi <= var.content[2] <= math.pi


def test_update_var_3d_zero_correction_normalizes_only():
    var = Variable(0, VariableType.VEHICLE_3D, [1.0, 2.0, 3.0, 0.0, 0.0, 0.0, 2.0], range(0, 6))
    update_var(var, [0.0] * 6)
    assert var.content == pytest.approx([1.0, 2.0, 3.0, 0.0, 0.0, 0.0, 1.0])