from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .codegen import CodeGenerator
from .emitter import RickrollEmitter
from .lexer import Program, parse
from .nodes import Script
from .tape import DEFAULT_TAPE_SIZE, POINTER

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompilerConfig:
    tape_size: int = DEFAULT_TAPE_SIZE
    eof_value: int = 0
    wrap_cells: bool = False
    indent: int = 2
    trace: bool = False

    def __post_init__(self) -> None:
        if self.tape_size < 1:
            raise ValueError("tape_size must be at least 1")
        if not (0 <= self.eof_value <= 255):
            raise ValueError("eof_value must be within 0-255")
        if self.indent < 0:
            raise ValueError("indent must be non-negative")


class BrainfuckCompiler:
    def __init__(self, config: Optional[CompilerConfig] = None) -> None:
        self.config = config or CompilerConfig()

    def parse(self, source: str) -> Program:
        return parse(source)

    def generate(self, source: str) -> Script:
        return self.translate(self.parse(source))

    def translate(self, program: Program) -> Script:
        logger.debug("Translating %d instructions", len(program))
        generator = CodeGenerator(
            tape_size=self.config.tape_size,
            eof_value=self.config.eof_value,
            wrap_cells=self.config.wrap_cells,
        )
        return generator.generate(program)

    def compile(self, source: str) -> str:
        script = self.generate(source)
        emitter = RickrollEmitter(indent=self.config.indent, trace=self.config.trace)
        output = emitter.emit(script)
        logger.debug(
            "Emitted %d lines (%s addressing)",
            output.count("\n"),
            addressing_of(script),
        )
        return output


def addressing_of(script: Script) -> str:
    return "dynamic" if POINTER.name in script.variables else "static"


__all__ = ["BrainfuckCompiler", "CompilerConfig", "addressing_of"]
