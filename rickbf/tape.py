from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .errors import InvariantViolation, TapeOutOfBounds
from .lexer import Op, Program
from .nodes import Assign, BinaryOp, Cell, Expr, Halt, If, Literal, Read, Statement, Var, Write

DEFAULT_TAPE_SIZE = 30000
CELL_LIMIT = 256

# Runtime registers of the generated program.
POINTER = Var("Cursor")
VALUE = Var("Value")


class AddressingMode(str, Enum):
    STATIC = "static"
    DYNAMIC = "dynamic"


@dataclass
class PointerState:
    """Compile-time belief about the data pointer.

    In static mode ``address`` is the exact cell under the pointer. Once the
    state turns dynamic the address lives in the ``Cursor`` register and
    ``address`` is meaningless; the switch never reverts.
    """

    mode: AddressingMode = AddressingMode.STATIC
    address: int = 0

    @property
    def is_static(self) -> bool:
        return self.mode is AddressingMode.STATIC


@dataclass
class Access:
    value: Expr
    setup: List[Statement] = field(default_factory=list)


def analyze_loops(program: Program) -> Dict[int, Optional[int]]:
    """Return the net pointer delta of every loop body keyed by its ``[`` index.

    A body containing a nested loop that does not net to zero has no fixed
    delta and maps to ``None``.
    """
    deltas: Dict[int, Optional[int]] = {}
    stack: List[Tuple[int, Optional[int]]] = []
    current: Optional[int] = 0
    for index, instr in enumerate(program):
        if instr.op is Op.LOOP_START:
            stack.append((index, current))
            current = 0
        elif instr.op is Op.LOOP_END:
            if not stack:
                raise InvariantViolation(f"Loop end at position {instr.position} has no open loop", instr.position)
            start, outer = stack.pop()
            deltas[start] = current
            if outer is None or current != 0:
                current = None
            else:
                current = outer
        elif current is not None:
            if instr.op is Op.INC_PTR:
                current += 1
            elif instr.op is Op.DEC_PTR:
                current -= 1
    return deltas


class TapeModel:
    def __init__(self, size: int = DEFAULT_TAPE_SIZE) -> None:
        if size < 1:
            raise ValueError("tape size must be at least 1")
        self.size = size
        self._cells: Dict[int, Cell] = {}
        self._touched: set[int] = set()
        self._dynamic = False

    # --- Addressing primitives ---

    def name_of(self, address: int) -> str:
        return self.cell(address).name

    def cell(self, address: int, position: Optional[int] = None) -> Cell:
        if not (0 <= address < self.size):
            raise TapeOutOfBounds(address, self.size, position)
        cell = self._cells.get(address)
        if cell is None:
            cell = Cell(address=address, name=f"Cell{address}")
            self._cells[address] = cell
        self._touched.add(address)
        return cell

    def variables(self) -> List[str]:
        if self._dynamic:
            addresses = range(self.size)
        else:
            addresses = sorted(self._touched)
        names = [self.name_of(address) for address in addresses]
        if self._dynamic:
            names.extend([POINTER.name, VALUE.name])
        return names

    def read(self, state: PointerState) -> Access:
        if state.is_static:
            return Access(value=Read(self.cell(state.address)))
        setup = self._cascade(lambda cell: [Assign(VALUE, Read(cell))])
        return Access(setup=setup, value=VALUE)

    def write(self, state: PointerState, value: Expr) -> List[Statement]:
        if state.is_static:
            return [Assign(Write(self.cell(state.address)), value)]
        return self._cascade(lambda cell: [Assign(Write(cell), value)])

    def update(self, state: PointerState, delta: int, wrap: bool = False) -> List[Statement]:
        """Add ``delta`` (+1 or -1) to the current cell in place."""
        if state.is_static:
            return self._adjust(self.cell(state.address), delta, wrap)
        return self._cascade(lambda cell: self._adjust(cell, delta, wrap))

    # --- Pointer tracking ---

    def move(self, state: PointerState, delta: int, position: Optional[int] = None) -> List[Statement]:
        if state.is_static:
            target = state.address + delta
            if not (0 <= target < self.size):
                raise TapeOutOfBounds(target, self.size, position)
            state.address = target
            return []
        edge = self.size - 1 if delta > 0 else 0
        op = "+" if delta > 0 else "-"
        return [
            If(BinaryOp("==", POINTER, Literal(edge)), [Halt("TapeOutOfBounds")]),
            Assign(POINTER, BinaryOp(op, POINTER, Literal(1))),
        ]

    def enter_dynamic(self, state: PointerState) -> List[Statement]:
        if not state.is_static:
            return []
        state.mode = AddressingMode.DYNAMIC
        self._dynamic = True
        return [Assign(POINTER, Literal(state.address))]

    # --- Helpers ---

    def _cascade(self, arm: Callable[[Cell], List[Statement]]) -> List[Statement]:
        self._dynamic = True
        return [
            If(BinaryOp("==", POINTER, Literal(address)), arm(self.cell(address)))
            for address in range(self.size)
        ]

    def _adjust(self, cell: Cell, delta: int, wrap: bool) -> List[Statement]:
        op = "+" if delta > 0 else "-"
        step = Assign(Write(cell), BinaryOp(op, Read(cell), Literal(1)))
        if not wrap:
            return [step]
        if delta > 0:
            return [step, If(BinaryOp("==", Read(cell), Literal(CELL_LIMIT)), [Assign(Write(cell), Literal(0))])]
        return [If(BinaryOp("==", Read(cell), Literal(0)), [Assign(Write(cell), Literal(CELL_LIMIT))]), step]


__all__ = [
    "Access",
    "AddressingMode",
    "CELL_LIMIT",
    "DEFAULT_TAPE_SIZE",
    "POINTER",
    "PointerState",
    "TapeModel",
    "VALUE",
    "analyze_loops",
]
