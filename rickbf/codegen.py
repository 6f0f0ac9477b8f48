from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import InvariantViolation
from .lexer import Instruction, Op, Program
from .nodes import BinaryOp, Emit, Input, Literal, Loop, Script, Statement, Write
from .tape import (
    DEFAULT_TAPE_SIZE,
    VALUE,
    AddressingMode,
    PointerState,
    TapeModel,
    analyze_loops,
)

logger = logging.getLogger(__name__)


@dataclass
class LoopFrame:
    start: int
    node: Loop
    parent: List[Statement]
    mode: AddressingMode
    address: int


@dataclass
class CodeGenState:
    tape: TapeModel
    deltas: Dict[int, Optional[int]]
    pointer: PointerState = field(default_factory=PointerState)
    body: List[Statement] = field(default_factory=list)
    loops: List[LoopFrame] = field(default_factory=list)


class CodeGenerator:
    """Translate a validated :class:`Program` into a target-neutral :class:`Script`.

    Addresses are resolved at compile time for as long as the pointer
    position can be proven. The first loop whose body does not return the
    pointer to where it started turns addressing dynamic for the rest of the
    program, and every tape access after that becomes a selector cascade over
    the whole tape.
    """

    def __init__(
        self,
        tape_size: int = DEFAULT_TAPE_SIZE,
        eof_value: int = 0,
        wrap_cells: bool = False,
    ) -> None:
        self.tape_size = tape_size
        self.eof_value = eof_value
        self.wrap_cells = wrap_cells

    def generate(self, program: Program) -> Script:
        state = CodeGenState(tape=TapeModel(self.tape_size), deltas=analyze_loops(program))
        root = state.body
        for index, instr in enumerate(program):
            self._emit_instruction(index, instr, state)
        if state.loops:
            frame = state.loops[-1]
            raise InvariantViolation(f"Loop opened at instruction {frame.start} was never closed")
        return Script(variables=state.tape.variables(), body=root)

    # --- Instruction emitters ---

    def _emit_instruction(self, index: int, instr: Instruction, state: CodeGenState) -> None:
        tape = state.tape
        if instr.op is Op.INC_PTR:
            state.body.extend(tape.move(state.pointer, 1, instr.position))
        elif instr.op is Op.DEC_PTR:
            state.body.extend(tape.move(state.pointer, -1, instr.position))
        elif instr.op is Op.INC_CELL:
            state.body.extend(tape.update(state.pointer, 1, wrap=self.wrap_cells))
        elif instr.op is Op.DEC_CELL:
            state.body.extend(tape.update(state.pointer, -1, wrap=self.wrap_cells))
        elif instr.op is Op.OUTPUT:
            access = tape.read(state.pointer)
            state.body.extend(access.setup)
            state.body.append(Emit(access.value))
        elif instr.op is Op.INPUT:
            self._emit_input(state)
        elif instr.op is Op.LOOP_START:
            self._open_loop(index, instr, state)
        elif instr.op is Op.LOOP_END:
            self._close_loop(index, instr, state)
        else:
            raise InvariantViolation(f"Unhandled instruction: {instr}", instr.position)

    def _emit_input(self, state: CodeGenState) -> None:
        pointer = state.pointer
        if pointer.is_static:
            cell = state.tape.cell(pointer.address)
            state.body.append(Input(Write(cell), self.eof_value))
            return
        state.body.append(Input(VALUE, self.eof_value))
        state.body.extend(state.tape.write(pointer, VALUE))

    def _open_loop(self, index: int, instr: Instruction, state: CodeGenState) -> None:
        pointer = state.pointer
        if pointer.is_static and state.deltas.get(index) != 0:
            logger.debug(
                "Pointer leaves static addressing at position %d (loop delta %s)",
                instr.position,
                state.deltas.get(index),
            )
            state.body.extend(state.tape.enter_dynamic(pointer))
        access = state.tape.read(pointer)
        state.body.extend(access.setup)
        node = Loop(condition=BinaryOp("!=", access.value, Literal(0)))
        state.loops.append(
            LoopFrame(
                start=index,
                node=node,
                parent=state.body,
                mode=pointer.mode,
                address=pointer.address,
            )
        )
        state.body = node.body

    def _close_loop(self, index: int, instr: Instruction, state: CodeGenState) -> None:
        if not state.loops:
            raise InvariantViolation(f"Loop end at position {instr.position} has no open loop", instr.position)
        frame = state.loops.pop()
        if frame.start != instr.match:
            raise InvariantViolation(
                f"Loop end at position {instr.position} closes instruction {frame.start}, expected {instr.match}",
                instr.position,
            )
        pointer = state.pointer
        if frame.mode is AddressingMode.DYNAMIC and pointer.is_static:
            raise InvariantViolation("Pointer state reverted to static addressing", instr.position)
        if pointer.is_static and pointer.address != frame.address:
            raise InvariantViolation(
                f"Static loop at instruction {frame.start} ended at cell {pointer.address}, not {frame.address}",
                instr.position,
            )
        # the condition register has to be reloaded before the next test
        state.body.extend(state.tape.read(pointer).setup)
        state.body = frame.parent
        state.body.append(frame.node)


__all__ = ["CodeGenerator", "CodeGenState", "LoopFrame"]
