"""JSON representation of factor graph models."""

from __future__ import annotations

import json
import math
from typing import Any

from slamgraph.model import FactorGraphModel
from slamgraph.parsing import ParseError, Parser


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid number: {name}")


def _format_float(value: float) -> str:
    if not math.isfinite(value):
        return "null"
    text = repr(value)
    if "e" in text:
        mantissa, exponent = text.split("e")
        text = f"{mantissa}e{int(exponent)}"
    return text


def _dump(value: Any, level: int) -> str:
    inner = "  " * (level + 1)
    outer = "  " * level
    if isinstance(value, dict):
        if not value:
            return "{}"
        items = [
            f"{inner}{json.dumps(key, ensure_ascii=False)}: {_dump(item, level + 1)}"
            for key, item in value.items()
        ]
        return "{\n" + ",\n".join(items) + "\n" + outer + "}"
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        items = [f"{inner}{_dump(item, level + 1)}" for item in value]
        return "[\n" + ",\n".join(items) + "\n" + outer + "]"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    raise TypeError(f"cannot serialize {type(value).__name__}")


class JsonParser(Parser):
    """JSON files holding the fields of a factor graph model.

    Output is pretty-printed with two-space indentation and no trailing newline;
    non-finite numbers are written as ``null``.
    """

    @classmethod
    def parse_string_to_model(cls, s: str) -> FactorGraphModel:
        try:
            data = json.loads(s, parse_constant=_reject_constant)
            return FactorGraphModel.from_dict(data)
        except ValueError as exc:
            raise ParseError(f"Parsing to FactorGraphModel unsuccessful: {exc}") from exc

    @classmethod
    def compose_model_to_string(cls, model: FactorGraphModel) -> str:
        try:
            return _dump(model.to_dict(), 0)
        except TypeError as exc:
            raise ParseError(
                f"Composing FactorGraphModel as JSON string unsuccessful: {exc}"
            ) from exc