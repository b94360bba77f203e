"""Conversion between factor graph models and G2O files."""

from __future__ import annotations

import math
import re

from slamgraph.model import Edge, FactorGraphModel, Vertex
from slamgraph.parsing import ParseError, Parser

_OFFSET_LINE = "PARAMS_SE3OFFSET 0 0 0 0 0 0 0 1"

# keyword -> (vertex type, content length)
_VERTEX_KEYWORDS = {
    "VERTEX_SE2": ("Vehicle2D", 3),
    "VERTEX_XY": ("Landmark2D", 2),
    "VERTEX_SE3:QUAT": ("Vehicle3D", 7),
    "VERTEX_TRACKXYZ": ("Landmark3D", 3),
}

# keyword -> (edge type, vertex/offset token count, restriction length, information dimension)
_EDGE_KEYWORDS = {
    "EDGE_PRIOR_SE2": ("Position2D", 1, 3, 3),
    "EDGE_SE2": ("Odometry2D", 2, 3, 3),
    "EDGE_SE2_XY": ("Observation2D", 2, 2, 2),
    "EDGE_SE3_PRIOR": ("Position3D", 2, 7, 6),
    "EDGE_SE3:QUAT": ("Odometry3D", 2, 7, 6),
    "EDGE_SE3_TRACKXYZ": ("Observation3D", 3, 3, 3),
}

# Edges whose last vertex token is the SE3 offset parameter, expected to be 0.
_OFFSET_EDGES = frozenset({"EDGE_SE3_PRIOR", "EDGE_SE3_TRACKXYZ"})
_OFFSET_EDGE_TYPES = frozenset({"Position3D", "Observation3D"})

_VERTEX_NAMES = {type_name: keyword for keyword, (type_name, _) in _VERTEX_KEYWORDS.items()}
_EDGE_NAMES = {entry[0]: keyword for keyword, entry in _EDGE_KEYWORDS.items()}
_EDGE_DIMENSIONS = {entry[0]: entry[3] for entry in _EDGE_KEYWORDS.values()}

_UINT_PATTERN = re.compile(r"\+?[0-9]+")
_FLOAT_PATTERN = re.compile(
    r"[+-]?(?:[0-9]+\.?[0-9]*(?:[eE][+-]?[0-9]+)?"
    r"|\.[0-9]+(?:[eE][+-]?[0-9]+)?"
    r"|(?i:inf|infinity|nan))"
)
_USIZE_LIMIT = 2**64


def _value_error(token: str, line_number: int) -> ParseError:
    return ParseError(
        "Could not parse the following value to the correct data type "
        f"in line {line_number}: {token}"
    )


def _parse_uint(token: str, line_number: int) -> int:
    if not _UINT_PATTERN.fullmatch(token):
        raise _value_error(token, line_number)
    value = int(token)
    if value >= _USIZE_LIMIT:
        raise _value_error(token, line_number)
    return value


def _parse_float(token: str, line_number: int) -> float:
    if not _FLOAT_PATTERN.fullmatch(token):
        raise _value_error(token, line_number)
    return float(token)


def _check_token_count(expected: int, actual: int, line_number: int) -> None:
    if actual != expected:
        raise ParseError(
            f"Wrong number of tokens in line {line_number}: "
            f"Expected: {expected}; Actual: {actual}"
        )


def _upper_triangle(dim: int) -> list[tuple[int, int]]:
    """Row-major (row, column) pairs of a square matrix's upper triangle."""
    return [(i, j) for i in range(dim) for j in range(i, dim)]


def _full_matrix_mapping(dim: int) -> list[int]:
    """For each entry of a dim x dim matrix, its position in the upper triangle."""
    position = {pair: k for k, pair in enumerate(_upper_triangle(dim))}
    return [
        position[(min(row, col), max(row, col))]
        for row in range(dim)
        for col in range(dim)
    ]


def _format_float(value: float) -> str:
    """Shortest round-trip text, exponent written without padding or plus sign."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = repr(float(value))
    if "e" in text:
        mantissa, exponent = text.split("e")
        return f"{mantissa}e{int(exponent)}"
    return text


def _parse_vertex(tokens: list[str], line_number: int) -> Vertex:
    type_name, content_length = _VERTEX_KEYWORDS[tokens[0]]
    _check_token_count(2 + content_length, len(tokens), line_number)
    return Vertex(
        id=_parse_uint(tokens[1], line_number),
        vertex_type=type_name,
        content=[_parse_float(t, line_number) for t in tokens[2:]],
    )


def _parse_edge(tokens: list[str], line_number: int) -> Edge:
    keyword = tokens[0]
    type_name, vertex_count, restriction_length, dim = _EDGE_KEYWORDS[keyword]
    upper_length = dim * (dim + 1) // 2
    _check_token_count(
        1 + vertex_count + restriction_length + upper_length, len(tokens), line_number
    )
    vertex_end = vertex_count if keyword in _OFFSET_EDGES else 1 + vertex_count
    restriction_start = 1 + vertex_count
    matrix_start = restriction_start + restriction_length
    upper_values = tokens[matrix_start:]
    return Edge(
        edge_type=type_name,
        vertices=[_parse_uint(t, line_number) for t in tokens[1:vertex_end]],
        restriction=[
            _parse_float(t, line_number) for t in tokens[restriction_start:matrix_start]
        ],
        information_matrix=[
            _parse_float(upper_values[k], line_number) for k in _full_matrix_mapping(dim)
        ],
    )


def _parse_fix(tokens: list[str], line_number: int) -> set[int]:
    if len(tokens) == 1:
        raise ParseError(
            f"Empty set of fixed vertices in line {line_number}: "
            "Expected at least one vertex ID."
        )
    return {_parse_uint(t, line_number) for t in tokens[1:]}


def _parse_line(model: FactorGraphModel, line: str, line_number: int) -> None:
    tokens = line.split()
    if not tokens or line.startswith("#"):
        return
    keyword = tokens[0]
    if keyword in _VERTEX_KEYWORDS:
        model.vertices.append(_parse_vertex(tokens, line_number))
    elif keyword in _EDGE_KEYWORDS:
        model.edges.append(_parse_edge(tokens, line_number))
    elif keyword == "FIX":
        model.fixed_vertices.update(_parse_fix(tokens, line_number))
    elif keyword == "PARAMS_SE3OFFSET":
        pass  # only the zero offset with ID 0 is supported
    else:
        raise ParseError(f"Unknown keyword at beginning of line {line_number}: {keyword}")


def _vertex_to_string(vertex: Vertex, fixed_vertices: set[int]) -> str:
    try:
        keyword = _VERTEX_NAMES[vertex.vertex_type]
    except KeyError:
        raise ParseError(
            f"Vertex type unsupported to be composed to G2O format: {vertex.vertex_type}"
        ) from None
    tokens = [keyword, str(vertex.id), *(_format_float(v) for v in vertex.content)]
    text = " ".join(tokens)
    if vertex.id in fixed_vertices:
        text += f"\nFIX {vertex.id}"
    return text


def _edge_to_string(edge: Edge) -> str:
    try:
        keyword = _EDGE_NAMES[edge.edge_type]
    except KeyError:
        raise ParseError(
            f"Edge type unsupported to be composed to G2O format: {edge.edge_type}"
        ) from None
    tokens = [keyword, *(str(v) for v in edge.vertices)]
    if edge.edge_type in _OFFSET_EDGE_TYPES:
        tokens.append("0")
    tokens.extend(_format_float(v) for v in edge.restriction)
    dim = _EDGE_DIMENSIONS[edge.edge_type]
    try:
        tokens.extend(
            _format_float(edge.information_matrix[row * dim + col])
            for row, col in _upper_triangle(dim)
        )
    except IndexError:
        raise ParseError(
            f"Information matrix of {edge.edge_type} edge needs {dim * dim} values, "
            f"got {len(edge.information_matrix)}"
        ) from None
    return " ".join(tokens)


class G2oParser(Parser):
    """G2O files.

    Supported vertices: VERTEX_SE2, VERTEX_XY, VERTEX_SE3:QUAT, VERTEX_TRACKXYZ.
    Supported edges: EDGE_PRIOR_SE2, EDGE_SE2, EDGE_SE2_XY, EDGE_SE3_PRIOR,
    EDGE_SE3:QUAT, EDGE_SE3_TRACKXYZ.

    EDGE_SE3_PRIOR and EDGE_SE3_TRACKXYZ take the offset parameter with ID 0 as
    their last vertex token, declared as ``PARAMS_SE3OFFSET 0 0 0 0 0 0 0 1``;
    other offsets are not supported.
    """

    @classmethod
    def parse_string_to_model(cls, s: str) -> FactorGraphModel:
        model = FactorGraphModel()
        for line_number, line in enumerate(s.split("\n"), start=1):
            _parse_line(model, line, line_number)
        return model

    @classmethod
    def compose_model_to_string(cls, model: FactorGraphModel) -> str:
        lines: list[str] = []
        if any(e.edge_type in _OFFSET_EDGE_TYPES for e in model.edges):
            lines.append(_OFFSET_LINE)
        lines.extend(_vertex_to_string(v, model.fixed_vertices) for v in model.vertices)
        lines.extend(_edge_to_string(e) for e in model.edges)
        return "\n".join(lines)