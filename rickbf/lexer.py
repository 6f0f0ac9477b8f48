from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from .errors import UnmatchedLoopEnd, UnmatchedLoopStart


class Op(str, Enum):
    INC_PTR = ">"
    DEC_PTR = "<"
    INC_CELL = "+"
    DEC_CELL = "-"
    OUTPUT = "."
    INPUT = ","
    LOOP_START = "["
    LOOP_END = "]"


_OPS = {op.value: op for op in Op}


@dataclass(frozen=True)
class Instruction:
    op: Op
    position: int
    line: int = 1
    column: int = 1
    # index of the matching bracket, only set for loop instructions
    match: Optional[int] = None


@dataclass(frozen=True)
class Program:
    instructions: Tuple[Instruction, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.instructions)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self.instructions[index]

    def loop_pairs(self) -> List[Tuple[int, int]]:
        return [
            (index, instr.match)
            for index, instr in enumerate(self.instructions)
            if instr.op is Op.LOOP_START and instr.match is not None
        ]


def parse(source: str) -> Program:
    """Scan ``source`` into a validated :class:`Program`.

    Characters outside the eight instruction symbols are comments. Loop
    brackets are cross-linked by instruction index. A stray ``]`` raises
    :class:`UnmatchedLoopEnd` where it occurs; any ``[`` left open at the end
    raises :class:`UnmatchedLoopStart` for the leftmost one.
    """
    scanned: List[Tuple[Op, int, int, int]] = []
    matches: dict[int, int] = {}
    stack: List[int] = []
    line = 1
    column = 1
    for position, char in enumerate(source):
        op = _OPS.get(char)
        if op is not None:
            index = len(scanned)
            scanned.append((op, position, line, column))
            if op is Op.LOOP_START:
                stack.append(index)
            elif op is Op.LOOP_END:
                if not stack:
                    raise UnmatchedLoopEnd(position, line, column)
                start = stack.pop()
                matches[start] = index
                matches[index] = start
        if char == "\n":
            line += 1
            column = 1
        else:
            column += 1

    if stack:
        _, position, err_line, err_column = scanned[stack[0]]
        raise UnmatchedLoopStart(position, err_line, err_column)

    instructions = tuple(
        Instruction(op=op, position=position, line=ln, column=col, match=matches.get(index))
        for index, (op, position, ln, col) in enumerate(scanned)
    )
    return Program(instructions=instructions)


__all__ = ["Instruction", "Op", "Program", "parse"]
