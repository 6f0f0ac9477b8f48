from .compiler import BrainfuckCompiler, CompilerConfig
from .errors import (
    CompileError,
    InvariantViolation,
    TapeOutOfBounds,
    UnmatchedLoopEnd,
    UnmatchedLoopStart,
)
from .lexer import Program, parse

__all__ = [
    "BrainfuckCompiler",
    "CompileError",
    "CompilerConfig",
    "InvariantViolation",
    "Program",
    "TapeOutOfBounds",
    "UnmatchedLoopEnd",
    "UnmatchedLoopStart",
    "parse",
]
