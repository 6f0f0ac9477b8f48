from pathlib import Path
import tempfile
from contextlib import redirect_stderr, redirect_stdout
import io
import unittest

from rickbf import BrainfuckCompiler, CompilerConfig, UnmatchedLoopStart
from rickbf.cli import main as cli_main

from script_runner import ScriptHalted, run_script


class CompilerConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        config = CompilerConfig()
        self.assertEqual(config.tape_size, 30000)
        self.assertEqual(config.eof_value, 0)

    def test_rejects_invalid_values(self) -> None:
        with self.assertRaises(ValueError):
            CompilerConfig(tape_size=0)
        with self.assertRaises(ValueError):
            CompilerConfig(eof_value=256)
        with self.assertRaises(ValueError):
            CompilerConfig(indent=-1)


class CompilerSemanticsTests(unittest.TestCase):
    def compile_and_run(self, source: str, input_data: str = "", **options) -> str:
        compiler = BrainfuckCompiler(CompilerConfig(**options))
        return run_script(compiler.generate(source), input_data)

    def test_increment_then_output(self) -> None:
        self.assertEqual(self.compile_and_run("+.", tape_size=1), "\x01")

    def test_read_increment_write(self) -> None:
        self.assertEqual(self.compile_and_run(",+.", "A"), "B")

    def test_multiplication_loop(self) -> None:
        source = "++++++++[>++++++++<-]>+."
        self.assertEqual(self.compile_and_run(source, tape_size=2), "A")

    def test_reverse_input_with_dynamic_addressing(self) -> None:
        source = ">,[>,]<[.<]"
        self.assertEqual(self.compile_and_run(source, "abc", tape_size=8), "cba")

    def test_echo_until_eof(self) -> None:
        self.assertEqual(self.compile_and_run(",[.,]", "hey"), "hey")

    def test_eof_value_is_configurable(self) -> None:
        self.assertEqual(self.compile_and_run(",.", "", eof_value=5), "\x05")

    def test_wrapping_cells(self) -> None:
        self.assertEqual(self.compile_and_run("-.", wrap_cells=True, tape_size=1), "\xff")
        source = "+" * 256 + "[-]+."
        self.assertEqual(self.compile_and_run(source, wrap_cells=True, tape_size=1), "\x01")

    def test_runtime_pointer_overflow_halts(self) -> None:
        script = BrainfuckCompiler(CompilerConfig(tape_size=3)).generate("+[>+]")
        with self.assertRaises(ScriptHalted) as ctx:
            run_script(script)
        self.assertEqual(ctx.exception.reason, "TapeOutOfBounds")

    def test_compilation_is_idempotent(self) -> None:
        compiler = BrainfuckCompiler(CompilerConfig(tape_size=6))
        source = ">,[>,]<[.<]"
        self.assertEqual(compiler.compile(source), compiler.compile(source))

    def test_unmatched_start_aborts(self) -> None:
        with self.assertRaises(UnmatchedLoopStart) as ctx:
            BrainfuckCompiler().compile("[")
        self.assertEqual(ctx.exception.position, 0)


class CLITests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_path = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write_source(self, content: str, name: str = "program.bf") -> Path:
        path = self.tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    def test_cli_writes_output_file(self) -> None:
        source_path = self._write_source(",+.")
        output_path = self.tmp_path / "out.rickroll"
        exit_code = cli_main([str(source_path), "-o", str(output_path), "--tape-size", "4"])
        self.assertEqual(exit_code, 0)
        emitted = output_path.read_text(encoding="utf-8")
        expected = BrainfuckCompiler(CompilerConfig(tape_size=4)).compile(",+.")
        self.assertEqual(emitted, expected)

    def test_cli_prints_to_stdout_without_output_path(self) -> None:
        source_path = self._write_source("+.")
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            exit_code = cli_main([str(source_path), "--tape-size", "1"])
        self.assertEqual(exit_code, 0)
        self.assertIn("[Chorus]", buffer.getvalue())

    def test_cli_reports_compile_error(self) -> None:
        source_path = self._write_source("+[")
        output_path = self.tmp_path / "out.rickroll"
        buffer = io.StringIO()
        with redirect_stderr(buffer):
            exit_code = cli_main([str(source_path), "-o", str(output_path)])
        self.assertEqual(exit_code, 1)
        self.assertIn("UnmatchedLoopStart at position 1", buffer.getvalue())
        self.assertFalse(output_path.exists())

    def test_cli_reports_static_bound_error(self) -> None:
        source_path = self._write_source(">>")
        buffer = io.StringIO()
        with redirect_stderr(buffer):
            exit_code = cli_main([str(source_path), "--tape-size", "2"])
        self.assertEqual(exit_code, 1)
        self.assertIn("TapeOutOfBounds", buffer.getvalue())

    def test_cli_rejects_invalid_configuration(self) -> None:
        source_path = self._write_source("+")
        buffer = io.StringIO()
        with redirect_stderr(buffer):
            exit_code = cli_main([str(source_path), "--eof-value", "300"])
        self.assertEqual(exit_code, 1)
        self.assertIn("eof_value", buffer.getvalue())

    def test_cli_forwards_layout_options(self) -> None:
        source_path = self._write_source("+[-]")
        output_path = self.tmp_path / "out.rickroll"
        exit_code = cli_main([str(source_path), "-o", str(output_path), "--indent", "4", "--trace"])
        self.assertEqual(exit_code, 0)
        emitted = output_path.read_text(encoding="utf-8")
        expected = BrainfuckCompiler(CompilerConfig(indent=4, trace=True)).compile("+[-]")
        self.assertEqual(emitted, expected)
        self.assertIn("    Never gonna give Cell0 Cell0 - 1", emitted)
        self.assertIn("Never gonna say 0", emitted)

    def test_cli_wrap_cells(self) -> None:
        source_path = self._write_source("-.")
        output_path = self.tmp_path / "out.rickroll"
        exit_code = cli_main([str(source_path), "-o", str(output_path), "--tape-size", "1", "--wrap-cells"])
        self.assertEqual(exit_code, 0)
        emitted = output_path.read_text(encoding="utf-8")
        self.assertIn("Inside we both know Cell0 == 0", emitted)
        self.assertIn("  Never gonna give Cell0 256", emitted)

    def test_cli_verbose_logs_addressing_switch(self) -> None:
        source_path = self._write_source("+[>]")
        output_path = self.tmp_path / "out.rickroll"
        with self.assertLogs("rickbf", level="DEBUG") as logs:
            exit_code = cli_main([str(source_path), "-o", str(output_path), "--tape-size", "3", "--verbose"])
        self.assertEqual(exit_code, 0)
        messages = "\n".join(logs.output)
        self.assertIn("Pointer leaves static addressing at position 1", messages)
        self.assertIn("dynamic addressing", messages)

    def test_cli_missing_file_errors(self) -> None:
        buffer = io.StringIO()
        with redirect_stderr(buffer):
            exit_code = cli_main(["does_not_exist.bf"])
        self.assertEqual(exit_code, 1)
        self.assertIn("Source file not found", buffer.getvalue())


if __name__ == "__main__":
    unittest.main()
