"""Command line entry points: optimize a factor graph file or change its format."""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Sequence
from pathlib import Path

from slamgraph.g2o import G2oParser
from slamgraph.json_format import JsonParser
from slamgraph.optimizer import optimize
from slamgraph.parsing import ParseError, Parser

DEFAULT_ITERATIONS = 10


def _parser_for(path: str | os.PathLike) -> type[Parser]:
    """JSON for ``.json`` files, G2O for everything else."""
    return JsonParser if Path(path).suffix.lower() == ".json" else G2oParser


def optimize_file(in_file: str | os.PathLike, out_file: str | os.PathLike, iterations: int) -> None:
    """Parse ``in_file``, optimize it and write the result to ``out_file``."""
    graph = _parser_for(in_file).parse_file(in_file)
    optimize(graph, iterations)
    _parser_for(out_file).compose_file(graph, out_file)


def convert_file(in_file: str | os.PathLike, out_file: str | os.PathLike) -> None:
    """Rewrite ``in_file`` in the format given by the suffix of ``out_file``."""
    graph = _parser_for(in_file).parse_file(in_file)
    _parser_for(out_file).compose_file(graph, out_file)


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slamgraph",
        description="Optimize factor graphs stored as G2O or JSON files.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    opt = commands.add_parser("optimize", help="optimize the variables of a factor graph")
    opt.add_argument("in_file")
    opt.add_argument("out_file")
    opt.add_argument(
        "-n",
        "--iterations",
        type=int,
        default=DEFAULT_ITERATIONS,
        help=f"number of iterations (default {DEFAULT_ITERATIONS})",
    )

    conv = commands.add_parser("convert", help="change the file format of a factor graph")
    conv.add_argument("in_file")
    conv.add_argument("out_file")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; return the exit status."""
    args = _build_argument_parser().parse_args(argv)
    try:
        if args.command == "optimize":
            if args.iterations < 0:
                raise ValueError("the number of iterations must not be negative")
            optimize_file(args.in_file, args.out_file, args.iterations)
        else:
            convert_file(args.in_file, args.out_file)
    except (ParseError, ValueError) as exc:
        print(f"slamgraph: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())