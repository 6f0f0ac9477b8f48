from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .compiler import BrainfuckCompiler, CompilerConfig
from .errors import CompileError
from .tape import DEFAULT_TAPE_SIZE


def _read_source(path: str) -> str:
    source_path = Path(path)
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")
    return source_path.read_text(encoding="utf-8")


def _write_output(path: str, data: str) -> None:
    output_path = Path(path)
    output_path.write_text(data, encoding="utf-8")


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Compile Brainfuck to Rickroll")
    parser.add_argument("source", help="Path to Brainfuck source file")
    parser.add_argument(
        "-o",
        "--output",
        help="Destination file for the Rickroll program (default: print to stdout)",
    )
    parser.add_argument(
        "--tape-size",
        type=int,
        default=DEFAULT_TAPE_SIZE,
        help=f"Number of addressable tape cells (default: {DEFAULT_TAPE_SIZE})",
    )
    parser.add_argument(
        "--eof-value",
        type=int,
        default=0,
        help="Value stored by ',' once input is exhausted (default: 0)",
    )
    parser.add_argument(
        "--wrap-cells",
        action="store_true",
        help="Treat cells as bytes: wrap values to 0-255 (default: unbounded integers)",
    )
    parser.add_argument("--indent", type=int, default=2, help="Number of spaces per indentation level")
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Insert debugging trace statements in the Rickroll output",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log compiler progress to stderr")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        source_text = _read_source(args.source)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    try:
        config = CompilerConfig(
            tape_size=args.tape_size,
            eof_value=args.eof_value,
            wrap_cells=args.wrap_cells,
            indent=args.indent,
            trace=args.trace,
        )
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1

    compiler = BrainfuckCompiler(config)
    try:
        rickroll_code = compiler.compile(source_text)
    except CompileError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.output:
        try:
            _write_output(args.output, rickroll_code)
        except OSError as exc:
            print(f"Unable to write to file \"{args.output}\": {exc}", file=sys.stderr)
            return 1
    else:
        sys.stdout.write(rickroll_code)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
