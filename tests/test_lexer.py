from __future__ import annotations

import dataclasses
import random
import unittest

from rickbf import UnmatchedLoopEnd, UnmatchedLoopStart, parse
from rickbf.lexer import Op


def _random_program(rng: random.Random, length: int) -> str:
    pieces = []
    depth = 0
    for _ in range(length):
        choice = rng.random()
        if choice < 0.15:
            pieces.append("[")
            depth += 1
        elif choice < 0.3 and depth:
            pieces.append("]")
            depth -= 1
        else:
            pieces.append(rng.choice("+-<>.,  xyz\n"))
    pieces.append("]" * depth)
    return "".join(pieces)


def _stack_matches(source: str) -> dict:
    """Pair brackets by instruction index, independently of the lexer."""
    matches = {}
    stack = []
    index = 0
    for char in source:
        if char not in "+-<>.,[]":
            continue
        if char == "[":
            stack.append(index)
        elif char == "]":
            start = stack.pop()
            matches[start] = index
            matches[index] = start
        index += 1
    return matches


class LexerTests(unittest.TestCase):
    def test_comments_are_ignored(self) -> None:
        program = parse("add +one, then print .")
        self.assertEqual([instr.op for instr in program], [Op.INC_CELL, Op.INPUT, Op.OUTPUT])

    def test_positions_point_into_original_source(self) -> None:
        program = parse("a+\n b>")
        self.assertEqual([instr.position for instr in program], [1, 5])
        self.assertEqual((program[1].line, program[1].column), (2, 3))

    def test_nested_loops_are_cross_linked(self) -> None:
        program = parse("+[>[-]<-]")
        self.assertEqual(program[1].match, 8)
        self.assertEqual(program[8].match, 1)
        self.assertEqual(program[3].match, 5)
        self.assertEqual(program[5].match, 3)
        self.assertIsNone(program[0].match)
        self.assertEqual(program.loop_pairs(), [(1, 8), (3, 5)])

    def test_program_is_immutable(self) -> None:
        program = parse("+")
        with self.assertRaises(dataclasses.FrozenInstanceError):
            program.instructions = ()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            program[0].match = 3

    def test_random_programs_match_stack_simulation(self) -> None:
        rng = random.Random(1234)
        for _ in range(200):
            source = _random_program(rng, rng.randint(0, 60))
            program = parse(source)
            starts = sum(1 for instr in program if instr.op is Op.LOOP_START)
            ends = sum(1 for instr in program if instr.op is Op.LOOP_END)
            self.assertEqual(starts, ends, source)
            linked = {index: instr.match for index, instr in enumerate(program) if instr.match is not None}
            self.assertEqual(linked, _stack_matches(source), source)


class LexerErrorTests(unittest.TestCase):
    def test_lone_loop_start(self) -> None:
        with self.assertRaises(UnmatchedLoopStart) as ctx:
            parse("[")
        self.assertEqual(ctx.exception.position, 0)
        self.assertEqual(ctx.exception.kind, "UnmatchedLoopStart")

    def test_reports_leftmost_unmatched_loop_start(self) -> None:
        with self.assertRaises(UnmatchedLoopStart) as ctx:
            parse("a[b[[]")
        self.assertEqual(ctx.exception.position, 1)
        self.assertIn("position 1", str(ctx.exception))

    def test_lone_loop_end(self) -> None:
        with self.assertRaises(UnmatchedLoopEnd) as ctx:
            parse("+]")
        self.assertEqual(ctx.exception.position, 1)

    def test_first_stray_loop_end_wins(self) -> None:
        with self.assertRaises(UnmatchedLoopEnd) as ctx:
            parse("[]]][")
        self.assertEqual(ctx.exception.position, 2)

    def test_loop_end_reported_before_later_open_loop(self) -> None:
        with self.assertRaises(UnmatchedLoopEnd) as ctx:
            parse("][")
        self.assertEqual(ctx.exception.position, 0)

    def test_error_carries_line_and_column(self) -> None:
        with self.assertRaises(UnmatchedLoopEnd) as ctx:
            parse("+\n  ]")
        self.assertEqual((ctx.exception.line, ctx.exception.column), (2, 3))
        self.assertEqual(str(ctx.exception), "UnmatchedLoopEnd at position 4 (line 2, column 3)")


if __name__ == "__main__":
    unittest.main()
