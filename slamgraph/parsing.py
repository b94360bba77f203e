"""Reading and writing factor graphs from and to files."""

from __future__ import annotations

import abc
import os
from pathlib import Path

from slamgraph.graph import FactorGraph
from slamgraph.model import FactorGraphModel, graph_to_model, model_to_graph

PathLike = str | os.PathLike


class ParseError(ValueError):
    """Raised when a file cannot be read, parsed, composed or written."""


class Parser(abc.ABC):
    """Base of all file formats: subclasses supply the string conversions."""

    @classmethod
    def parse_file(cls, file_path: PathLike) -> FactorGraph:
        """Parse the file at ``file_path`` into a factor graph."""
        return model_to_graph(cls.parse_file_to_model(file_path))

    @classmethod
    def parse_file_to_model(cls, file_path: PathLike) -> FactorGraphModel:
        """Parse the file at ``file_path`` into a factor graph model."""
        try:
            text = Path(file_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseError(f"File could not be parsed: {file_path}") from exc
        return cls.parse_string_to_model(text)

    @classmethod
    @abc.abstractmethod
    def parse_string_to_model(cls, s: str) -> FactorGraphModel:
        """Parse a string into a factor graph model."""

    @classmethod
    def compose_file(cls, factor_graph: FactorGraph, file_path: PathLike) -> None:
        """Write the serialization of a factor graph to ``file_path``."""
        cls.compose_model_to_file(graph_to_model(factor_graph), file_path)

    @classmethod
    def compose_model_to_file(cls, model: FactorGraphModel, file_path: PathLike) -> None:
        """Write the serialization of a model to ``file_path``."""
        text = cls.compose_model_to_string(model)
        try:
            Path(file_path).write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ParseError(f"File could not be written to: {file_path}") from exc

    @classmethod
    @abc.abstractmethod
    def compose_model_to_string(cls, model: FactorGraphModel) -> str:
        """Serialize a factor graph model to a string."""