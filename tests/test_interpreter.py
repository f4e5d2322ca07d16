import unittest

from bfcells import (
    CompileError,
    EmptyTape,
    PointerDrift,
    Program,
    StepLimitExceeded,
    TapeInterpreter,
    parse,
)
from bfcells.bf_interpreter import RunResult
from bfcells.compiler import Decrement, Increment, Read, Repeat, ShiftLeft, ShiftRight, Write


class ParserTests(unittest.TestCase):
    def test_builds_nested_tree(self) -> None:
        program = parse("+[-[>]]<,.")
        expected = Program(
            (
                Increment(),
                Repeat((Decrement(), Repeat((ShiftRight(),)))),
                ShiftLeft(),
                Read(),
                Write(),
            )
        )
        self.assertEqual(program, expected)

    def test_ignores_comments(self) -> None:
        self.assertEqual(parse("add one: +\n"), Program((Increment(),)))

    def test_unmatched_opening_bracket(self) -> None:
        with self.assertRaises(CompileError) as ctx:
            parse("[[")
        self.assertEqual(ctx.exception.reason, "unmatched opening bracket")

    def test_unmatched_closing_bracket(self) -> None:
        with self.assertRaises(CompileError) as ctx:
            parse("]")
        self.assertEqual(ctx.exception.reason, "unmatched closing bracket")

    def test_closing_before_opening(self) -> None:
        with self.assertRaises(CompileError) as ctx:
            parse("+][")
        self.assertEqual(str(ctx.exception), "unmatched closing bracket")

    def test_flatten_matches_instruction_text(self) -> None:
        samples = [
            "",
            "+-<>,.",
            "[]",
            "[[[]]][]",
            "++[>++[>+<-]<-]>>.",
            "x[ y-z ]q",
        ]
        for sample in samples:
            filtered = "".join(ch for ch in sample if ch in "+-<>,.[]")
            self.assertEqual(parse(sample).to_source(), filtered, sample)
            self.assertEqual(str(Program.parse(sample)), filtered, sample)

    def test_length_counts_nested_instructions(self) -> None:
        self.assertEqual(len(parse("+[-[>]]")), 5)

    def test_deep_nesting_round_trips(self) -> None:
        depth = 1200
        source = "[" * depth + "]" * depth
        program = parse(source)
        self.assertEqual(program.to_source(), source)
        self.assertEqual(len(program), depth)


class TapeInterpreterTests(unittest.TestCase):
    def test_simple_output(self) -> None:
        result = TapeInterpreter(tape_length=1).run("+++.")
        self.assertEqual(result.output, b"\x03")

    def test_clear_loop(self) -> None:
        result = TapeInterpreter(tape_length=1).run("+[-].")
        self.assertEqual(result.output, b"\x00")

    def test_zero_size_tape(self) -> None:
        with self.assertRaises(EmptyTape) as ctx:
            TapeInterpreter(tape_length=0)
        self.assertEqual(str(ctx.exception), "cannot make a tape of size 0")

    def test_cells_wrap(self) -> None:
        result = TapeInterpreter(tape_length=2).run("-.>" + "+" * 257 + ".")
        self.assertEqual(result.output, b"\xff\x01")

    def test_pointer_wraps(self) -> None:
        result = TapeInterpreter(tape_length=3).run("<+>>+")
        self.assertEqual(result.tape, b"\x00\x01\x01")
        self.assertEqual(result.pointer, 1)

    def test_read_consumes_input_then_zero(self) -> None:
        result = TapeInterpreter(tape_length=2).run(",.>,.", input_data=b"AB")
        self.assertEqual(result.output, b"AB")
        result = TapeInterpreter(tape_length=2).run("+,.", input_data=b"")
        self.assertEqual(result.output, b"\x00")

    def test_remaining_input_reported(self) -> None:
        result = TapeInterpreter(tape_length=1).run(",.", input_data=b"xyz")
        self.assertEqual(result.output, b"x")
        self.assertEqual(result.input, b"yz")

    def test_loop_pointer_drift(self) -> None:
        with self.assertRaises(PointerDrift) as ctx:
            TapeInterpreter(tape_length=4).run("+[>+]")
        self.assertEqual(str(ctx.exception), "the pointer index unexpectedly changed in a repeat loop")

    def test_balanced_loop_runs(self) -> None:
        result = TapeInterpreter(tape_length=3).run("+++[->++<]>.")
        self.assertEqual(result.output, b"\x06")

    def test_deeply_nested_loops(self) -> None:
        depth = 1200
        result = TapeInterpreter(tape_length=1).run("+" + "[" * depth + "-" + "]" * depth + ".")
        self.assertEqual(result.output, b"\x00")
        self.assertEqual(result.steps, 2 * depth + 3)

    def test_step_limit(self) -> None:
        with self.assertRaises(StepLimitExceeded):
            TapeInterpreter(tape_length=1, max_steps=10).run("+[]")

    def test_no_step_limit_by_default(self) -> None:
        result = TapeInterpreter(tape_length=1).run("-[-]")
        self.assertGreater(result.steps, 255)

    def test_program_run_accepts_tape_size(self) -> None:
        result = parse(">.").run(tape_size=2)
        self.assertEqual(result.pointer, 1)
        self.assertEqual(len(result.tape), 2)

    def test_interpreter_is_reusable(self) -> None:
        interpreter = TapeInterpreter(tape_length=2)
        interpreter.run("+++")
        result = interpreter.run(".")
        self.assertEqual(result.output, b"\x00")


class RunResultTests(unittest.TestCase):
    def test_window_is_bounded(self) -> None:
        result = RunResult(tape=bytes(range(20)), pointer=10, input=b"", output=b"", steps=0)
        start, cells = result.window(2)
        self.assertEqual(start, 8)
        self.assertEqual(cells, bytes([8, 9, 10, 11]))

    def test_format_tape_marks_pointer(self) -> None:
        result = RunResult(tape=b"\x01\x02\xff", pointer=1, input=b"", output=b"A", steps=3)
        self.assertEqual(result.format_tape(), "01 <02> FF")
        self.assertIn("output=b'A'", str(result))
        self.assertEqual(result.output_text, "A")


if __name__ == "__main__":
    unittest.main()
