from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Union

# === Expressions ===


class Expr:
    pass


@dataclass(frozen=True)
class Literal(Expr):
    value: int


@dataclass(frozen=True)
class Var(Expr):
    """A scratch register of the generated program (pointer, loaded value)."""

    name: str


@dataclass(frozen=True)
class Cell:
    address: int
    name: str


@dataclass(frozen=True)
class Read(Expr):
    cell: Cell


@dataclass(frozen=True)
class BinaryOp(Expr):
    op: str
    left: Expr
    right: Expr


# === Statements ===


class Statement:
    pass


@dataclass(frozen=True)
class Write:
    cell: Cell


Target = Union[Write, Var]


@dataclass
class Assign(Statement):
    target: Target
    value: Expr


@dataclass
class If(Statement):
    condition: Expr
    body: List[Statement] = field(default_factory=list)


@dataclass
class Loop(Statement):
    condition: Expr
    body: List[Statement] = field(default_factory=list)


@dataclass
class Emit(Statement):
    value: Expr


@dataclass
class Input(Statement):
    target: Target
    eof_value: int = 0


@dataclass
class Halt(Statement):
    reason: str


@dataclass
class Script:
    variables: List[str]
    body: List[Statement]


def walk(statements: List[Statement]):
    """Yield every statement in ``statements`` depth first, in program order."""
    for stmt in statements:
        yield stmt
        if isinstance(stmt, (If, Loop)):
            yield from walk(stmt.body)


__all__ = [
    "Assign",
    "BinaryOp",
    "Cell",
    "Emit",
    "Expr",
    "Halt",
    "If",
    "Input",
    "Literal",
    "Loop",
    "Read",
    "Script",
    "Statement",
    "Target",
    "Var",
    "Write",
    "walk",
]
