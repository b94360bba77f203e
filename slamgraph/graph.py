"""In-memory factor graph: variables as nodes, factors as directed edges."""

from __future__ import annotations

import bisect
from collections.abc import Iterator

from slamgraph.factor import Factor
from slamgraph.variable import Variable


class FactorGraph:
    """Variables indexed by insertion order with factors stored per source.

    Factors leaving a variable are kept sorted by target index, and at most one
    factor may connect a given source to a given target.
    """

    def __init__(self) -> None:
        self.variables: list[Variable] = []
        self.custom_to_index: dict[int, int] = {}
        self.matrix_dim = 0
        self._factors: list[list[tuple[int, Factor]]] = []

    def __len__(self) -> int:
        return len(self.variables)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.variables):
            raise IndexError(f"no variable at index {index}")

    def add_variable(self, variable: Variable) -> int:
        """Add a variable and return its internal index."""
        index = len(self.variables)
        self.variables.append(variable)
        self._factors.append([])
        self.custom_to_index[variable.id] = index
        if variable.fixed_range is not None:
            self.matrix_dim = max(self.matrix_dim, variable.fixed_range.stop)
        return index

    def add_factor(self, source_index: int, target_index: int, factor: Factor) -> bool:
        """Add a factor; return False if one already joins these variables."""
        self._check_index(source_index)
        self._check_index(target_index)
        row = self._factors[source_index]
        position = bisect.bisect_left([target for target, _ in row], target_index)
        if position < len(row) and row[position][0] == target_index:
            return False
        row.insert(position, (target_index, factor))
        return True

    def get_var(self, index: int) -> Variable:
        """Return the variable at the given internal index."""
        self._check_index(index)
        return self.variables[index]

    def factors_from(self, index: int) -> Iterator[tuple[int, Factor]]:
        """Yield ``(target_index, factor)`` for factors leaving a variable."""
        self._check_index(index)
        return iter(list(self._factors[index]))