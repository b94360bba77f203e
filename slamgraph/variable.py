"""Optimisable variables of a factor graph."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass


class VariableType(enum.Enum):
    """Kind of a variable; the value is the name used in serialized models."""

    VEHICLE_2D = "Vehicle2D"
    LANDMARK_2D = "Landmark2D"
    VEHICLE_3D = "Vehicle3D"
    LANDMARK_3D = "Landmark3D"

    @property
    def content_length(self) -> int:
        """Number of values stored for a variable of this type."""
        return _CONTENT_LENGTHS[self]

    @property
    def dimension(self) -> int:
        """Degrees of freedom the variable occupies in the linear system."""
        return _DIMENSIONS[self]


_CONTENT_LENGTHS = {
    VariableType.VEHICLE_2D: 3,
    VariableType.LANDMARK_2D: 2,
    VariableType.VEHICLE_3D: 7,
    VariableType.LANDMARK_3D: 3,
}

_DIMENSIONS = {
    VariableType.VEHICLE_2D: 3,
    VariableType.LANDMARK_2D: 2,
    VariableType.VEHICLE_3D: 6,
    VariableType.LANDMARK_3D: 3,
}


def _take_content(variable_type: VariableType, values: Iterable[float]) -> list[float]:
    values = [float(v) for v in values]
    needed = variable_type.content_length
    if len(values) < needed:
        raise ValueError(
            f"{variable_type.value} needs {needed} values, got {len(values)}"
        )
    return values[:needed]


@dataclass
class Variable:
    """A variable of the factor graph.

    ``content`` layouts:
    Vehicle2D ``[x, y, phi]``, Landmark2D ``[x, y]``,
    Vehicle3D ``[x, y, z, qx, qy, qz, qw]``, Landmark3D ``[x, y, z]``.

    ``fixed_range`` is the slice of the linear system the variable owns, or
    ``None`` when the variable is fixed and never changed by optimization.
    """

    id: int
    variable_type: VariableType
    content: list[float]
    fixed_range: range | None = None

    def __post_init__(self) -> None:
        self.content = _take_content(self.variable_type, self.content)
        if self.fixed_range is not None and len(self.fixed_range) != self.variable_type.dimension:
            raise ValueError(
                f"range {self.fixed_range} does not match the dimension "
                f"{self.variable_type.dimension} of {self.variable_type.value}"
            )

    @property
    def is_fixed(self) -> bool:
        """Whether the variable is excluded from optimization."""
        return self.fixed_range is None

    def set_content(self, update: Iterable[float]) -> None:
        """Replace the variable's content with the leading values of ``update``."""
        self.content = _take_content(self.variable_type, update)