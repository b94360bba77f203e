"""Serializable model of a factor graph and conversion to and from the graph."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from slamgraph.factor import Factor, FactorType, information_matrix_from_values
from slamgraph.graph import FactorGraph
from slamgraph.variable import Variable, VariableType


@dataclass
class Vertex:
    """A model vertex, representing a variable."""

    id: int
    vertex_type: str
    content: list[float]


@dataclass
class Edge:
    """A model edge, representing a factor.

    ``vertices`` holds one ID for Position edges and two for the others;
    ``information_matrix`` holds the whole (symmetric) matrix.
    """

    edge_type: str
    vertices: list[int]
    restriction: list[float]
    information_matrix: list[float]


@dataclass
class FactorGraphModel:
    """Vertices, edges and the IDs of fixed vertices."""

    vertices: list[Vertex] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    fixed_vertices: set[int] = field(default_factory=set)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready representation of the model."""
        return {
            "vertices": [
                {"id": v.id, "type": v.vertex_type, "content": list(v.content)}
                for v in self.vertices
            ],
            "edges": [
                {
                    "type": e.edge_type,
                    "vertices": list(e.vertices),
                    "restriction": list(e.restriction),
                    "informationMatrix": list(e.information_matrix),
                }
                for e in self.edges
            ],
            "fixedVertices": sorted(self.fixed_vertices),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FactorGraphModel:
        """Build a model from its JSON-ready representation.

        Raises ValueError when a field is missing or has the wrong type.
        """
        vertices = [
            Vertex(
                id=_uint(_field(item, "id", "vertex"), "vertex id"),
                vertex_type=_str(_field(item, "type", "vertex"), "vertex type"),
                content=_floats(_field(item, "content", "vertex"), "vertex content"),
            )
            for item in _list(_field(data, "vertices", "model"), "vertices")
        ]
        edges = [
            Edge(
                edge_type=_str(_field(item, "type", "edge"), "edge type"),
                vertices=_uints(_field(item, "vertices", "edge"), "edge vertices"),
                restriction=_floats(_field(item, "restriction", "edge"), "edge restriction"),
                information_matrix=_floats(
                    _field(item, "informationMatrix", "edge"), "edge information matrix"
                ),
            )
            for item in _list(_field(data, "edges", "model"), "edges")
        ]
        fixed = set(_uints(_field(data, "fixedVertices", "model"), "fixed vertices"))
        return cls(vertices=vertices, edges=edges, fixed_vertices=fixed)


def _field(mapping: Any, key: str, where: str) -> Any:
    if not isinstance(mapping, Mapping):
        raise ValueError(f"{where} must be an object")
    try:
        return mapping[key]
    except KeyError:
        raise ValueError(f"missing field `{key}` in {where}") from None


def _list(value: Any, what: str) -> list[Any]:
    if not isinstance(value, list):
        raise ValueError(f"{what} must be a list")
    return value


def _str(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{what} must be a string")
    return value


def _uint(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{what} must be a non-negative integer, got {value!r}")
    return value


def _uints(value: Any, what: str) -> list[int]:
    return [_uint(v, what) for v in _list(value, what)]


def _floats(value: Any, what: str) -> list[float]:
    result = []
    for v in _list(value, what):
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError(f"{what} must hold numbers, got {v!r}")
        result.append(float(v))
    return result


def _edge_vertex_index(graph: FactorGraph, edge: Edge, position: int) -> int:
    if position >= len(edge.vertices):
        raise ValueError(f"{edge.edge_type} edge needs more vertex IDs: {edge.vertices}")
    vertex_id = edge.vertices[position]
    try:
        return graph.custom_to_index[vertex_id]
    except KeyError:
        raise ValueError(f"Unknown vertex ID in edge: {vertex_id}") from None


def model_to_graph(model: FactorGraphModel) -> FactorGraph:
    """Build a factor graph from a model, allocating system ranges in vertex order."""
    graph = FactorGraph()
    for vertex in model.vertices:
        try:
            variable_type = VariableType(vertex.vertex_type)
        except ValueError:
            raise ValueError(f"Unsupported vertex type in the model: {vertex.vertex_type}") from None
        if vertex.id in model.fixed_vertices:
            fixed_range = None
        else:
            fixed_range = range(graph.matrix_dim, graph.matrix_dim + variable_type.dimension)
        graph.add_variable(Variable(vertex.id, variable_type, vertex.content, fixed_range))

    for edge in model.edges:
        try:
            factor_type = FactorType(edge.edge_type)
        except ValueError:
            raise ValueError(f"Unsupported edge type in the model: {edge.edge_type}") from None
        source = _edge_vertex_index(graph, edge, 0)
        target = _edge_vertex_index(graph, edge, 0 if factor_type.is_unary else 1)
        factor = Factor(
            factor_type,
            list(edge.restriction),
            information_matrix_from_values(edge.information_matrix),
        )
        graph.add_factor(source, target, factor)
    return graph


def graph_to_model(graph: FactorGraph) -> FactorGraphModel:
    """Describe a factor graph as a model, with edges grouped by source vertex."""
    model = FactorGraphModel()
    for index, variable in enumerate(graph.variables):
        model.vertices.append(
            Vertex(variable.id, variable.variable_type.value, list(variable.content))
        )
        for target, factor in graph.factors_from(index):
            edge_vertices = [variable.id]
            if target != index:
                edge_vertices.append(graph.get_var(target).id)
            model.edges.append(
                Edge(
                    factor.factor_type.value,
                    edge_vertices,
                    list(factor.constraint),
                    factor.information_matrix.flatten(order="F").tolist(),
                )
            )
        if variable.is_fixed:
            model.fixed_vertices.add(variable.id)
    return model