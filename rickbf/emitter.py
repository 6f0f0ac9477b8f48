from __future__ import annotations

from typing import Iterable, List, Tuple

from .nodes import (
    Assign,
    BinaryOp,
    Emit,
    Expr,
    Halt,
    If,
    Input,
    Literal,
    Loop,
    Read,
    Script,
    Statement,
    Target,
    Var,
    Write,
)

# Registers owned by the emitter's runtime support code.
ZERO = "Zero"
BUFFER = "Buffer"
GLYPH = "Glyph"

INT_TO_CHAR = "IntToChar"
CHAR_TO_INT = "CharToInt"

END_IF = "Your heart's been aching but you're too shy to say it"
END_WHILE = "We know the game and we're gonna play it"

# Characters the conversion verses know about; anything else maps to the fallback.
CHARSET: Tuple[int, ...] = (10,) + tuple(range(32, 127))
FALLBACK_CHAR = "$"

Line = Tuple[int, str]


def _char_literal(char: str) -> str:
    if char == "\n":
        return "'\\n'"
    if char in ("'", "\\"):
        return f"'\\{char}'"
    return f"'{char}'"


class RickrollEmitter:
    """Serialize a :class:`Script` as Rickroll source text.

    The output has two conversion verses followed by the ``[Chorus]``, which
    declares and zeroes every variable before running the program body.
    """

    def __init__(self, indent: int = 2, trace: bool = False) -> None:
        if indent < 0:
            raise ValueError("indent must be non-negative")
        self.indent = indent
        self.trace = trace

    def emit(self, script: Script) -> str:
        lines: List[Line] = []
        self._emit_int_to_char(lines)
        self._emit_char_to_int(lines)
        header = self._render(lines)
        header.append("[Chorus]")

        chorus: List[Line] = []
        self._emit_declarations(script.variables, chorus)
        self._emit_block(script.body, 0, chorus)
        if self.trace:
            chorus = self._with_trace(chorus)
        return "\n".join(header + self._render(chorus)) + "\n"

    # --- Verses ---

    def _emit_int_to_char(self, lines: List[Line]) -> None:
        lines.append((0, f"[Verse {INT_TO_CHAR}]"))
        lines.append((0, "(Ooh give you Code)"))
        for code in CHARSET:
            lines.append((0, f"Inside we both know Code == {code}"))
            lines.append((1, self._give_back(_char_literal(chr(code)))))
            lines.append((0, END_IF))
        lines.append((0, self._give_back(_char_literal(FALLBACK_CHAR))))

    def _emit_char_to_int(self, lines: List[Line]) -> None:
        lines.append((0, f"[Verse {CHAR_TO_INT}]"))
        lines.append((0, "(Ooh give you Letter)"))
        for code in CHARSET:
            lines.append((0, f"Inside we both know Letter == {_char_literal(chr(code))}"))
            lines.append((1, self._give_back(str(code))))
            lines.append((0, END_IF))
        lines.append((0, self._give_back("0")))

    @staticmethod
    def _give_back(value: str) -> str:
        return f"(Ooh) Never gonna give, never gonna give (give you {value})"

    # --- Chorus ---

    def _emit_declarations(self, variables: Iterable[str], lines: List[Line]) -> None:
        registers = [(ZERO, "0"), (BUFFER, "ARRAY"), (GLYPH, "0")]
        registers.extend((name, "0") for name in variables)
        for name, _ in registers:
            lines.append((0, f"Never gonna let {name} down"))
        for name, initial in registers:
            lines.append((0, f"Never gonna give {name} {initial}"))

    def _emit_block(self, statements: Iterable[Statement], level: int, lines: List[Line]) -> None:
        for stmt in statements:
            self._emit_statement(stmt, level, lines)

    def _emit_statement(self, stmt: Statement, level: int, lines: List[Line]) -> None:
        if isinstance(stmt, Assign):
            lines.append((level, f"Never gonna give {self._target(stmt.target)} {self._expr(stmt.value)}"))
        elif isinstance(stmt, If):
            lines.append((level, f"Inside we both know {self._expr(stmt.condition)}"))
            self._emit_block(stmt.body, level + 1, lines)
            lines.append((level, END_IF))
        elif isinstance(stmt, Loop):
            lines.append((level, f"Inside we both know {self._expr(stmt.condition)}"))
            self._emit_block(stmt.body, level + 1, lines)
            lines.append((level, END_WHILE))
        elif isinstance(stmt, Emit):
            lines.append((level, self._call(INT_TO_CHAR, self._expr(stmt.value), result=GLYPH)))
            lines.append((level, self._call("PutChar", GLYPH)))
        elif isinstance(stmt, Input):
            self._emit_input(stmt, level, lines)
        elif isinstance(stmt, Halt):
            # The target has no exit statement; running an undefined verse aborts the interpreter.
            lines.append((level, f'Never gonna say "{stmt.reason}"'))
            lines.append((level, self._call(stmt.reason, ZERO)))
        else:
            raise TypeError(f"Unhandled statement type: {stmt!r}")

    def _emit_input(self, stmt: Input, level: int, lines: List[Line]) -> None:
        # ReadLine strips the line terminator, so a newline is never delivered and an
        # empty line reads as end of input.
        target = self._target(stmt.target)
        lines.append((level, self._call("ArrayLength", BUFFER, result=GLYPH)))
        lines.append((level, f"Inside we both know {GLYPH} == 0"))
        lines.append((level + 1, self._call("ReadLine", "you", result=BUFFER)))
        lines.append((level, END_IF))
        lines.append((level, self._call("ArrayLength", BUFFER, result=GLYPH)))
        lines.append((level, f"Never gonna give {target} {stmt.eof_value}"))
        lines.append((level, f"Inside we both know {GLYPH} != 0"))
        lines.append((level + 1, f"Never gonna give {GLYPH} {BUFFER} : {ZERO}"))
        lines.append((level + 1, self._call("ArrayPop", f"{BUFFER}, {ZERO}", result=BUFFER)))
        lines.append((level + 1, self._call(CHAR_TO_INT, GLYPH, result=target)))
        lines.append((level, END_IF))

    @staticmethod
    def _call(function: str, args: str, result: str = "") -> str:
        call = f"Never gonna run {function} and desert {args}"
        if result:
            return f"(Ooh give you {result}) {call}"
        return call

    def _target(self, target: Target) -> str:
        if isinstance(target, Write):
            return target.cell.name
        if isinstance(target, Var):
            return target.name
        raise TypeError(f"Unhandled assignment target: {target!r}")

    def _expr(self, expr: Expr) -> str:
        if isinstance(expr, Literal):
            return str(expr.value)
        if isinstance(expr, Var):
            return expr.name
        if isinstance(expr, Read):
            return expr.cell.name
        if isinstance(expr, BinaryOp):
            return f"{self._expr(expr.left)} {expr.op} {self._expr(expr.right)}"
        raise TypeError(f"Unhandled expression type: {expr!r}")

    # --- Layout ---

    def _with_trace(self, lines: List[Line]) -> List[Line]:
        traced: List[Line] = []
        for number, (level, text) in enumerate(lines):
            traced.append((level, f"Never gonna say {number}"))
            traced.append((level, text))
        return traced

    def _render(self, lines: List[Line]) -> List[str]:
        return [" " * (level * self.indent) + text for level, text in lines]


__all__ = ["RickrollEmitter"]
