from __future__ import annotations

from typing import Optional


class CompileError(Exception):
    """Base class for every failure raised while compiling a Brainfuck program."""

    def __init__(self, message: str, position: Optional[int] = None) -> None:
        super().__init__(message)
        self.position = position

    @property
    def kind(self) -> str:
        return type(self).__name__


class _BracketError(CompileError):
    def __init__(self, position: int, line: int, column: int) -> None:
        self.line = line
        self.column = column
        message = f"{type(self).__name__} at position {position} (line {line}, column {column})"
        super().__init__(message, position)


class UnmatchedLoopStart(_BracketError):
    pass


class UnmatchedLoopEnd(_BracketError):
    pass


class TapeOutOfBounds(CompileError):
    def __init__(self, address: int, bound: int, position: Optional[int] = None) -> None:
        self.address = address
        self.bound = bound
        message = f"TapeOutOfBounds: address {address} outside [0, {bound})"
        if position is not None:
            message += f" at position {position}"
        super().__init__(message, position)


class InvariantViolation(CompileError):
    pass


__all__ = [
    "CompileError",
    "InvariantViolation",
    "TapeOutOfBounds",
    "UnmatchedLoopEnd",
    "UnmatchedLoopStart",
]
