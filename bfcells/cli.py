from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .bf_interpreter import DEFAULT_TAPE_LENGTH, TapeInterpreter
from .compiler import parse
from .errors import CompileError, MachineFault, StepLimitExceeded

logger = logging.getLogger(__name__)


def _read_source(path: str) -> str:
    source_path = Path(path)
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")
    return source_path.read_text(encoding="utf-8")


def _to_input_bytes(data: str) -> bytes:
    return data.encode("utf-8")


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Parse and run tape machine programs")
    parser.add_argument("source", nargs="?", help="Path to a program text file")
    parser.add_argument("-e", "--expr", help="Program text given inline instead of a file")
    parser.add_argument(
        "--tape-size",
        type=int,
        default=DEFAULT_TAPE_LENGTH,
        help=f"Number of tape cells (default: {DEFAULT_TAPE_LENGTH})",
    )
    parser.add_argument(
        "--input",
        default="",
        help="Optional input string supplied to the program",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Abort after this many executed instructions (default: unlimited)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only parse the program and report bracket errors",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="Print the tape around the pointer after running",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.expr is not None:
        source_text = args.expr
    elif args.source is not None:
        try:
            source_text = _read_source(args.source)
        except FileNotFoundError as exc:
            print(str(exc), file=sys.stderr)
            return 1
    else:
        parser.error("either a source file or --expr is required")

    try:
        program = parse(source_text)
    except CompileError as exc:
        print(f"Compile error: {exc.reason}", file=sys.stderr)
        return 1

    if args.check:
        print(f"ok: {len(program)} instructions")
        return 0

    try:
        interpreter = TapeInterpreter(tape_length=args.tape_size, max_steps=args.max_steps)
        result = interpreter.run(program, input_data=_to_input_bytes(args.input))
    except StepLimitExceeded as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except MachineFault as exc:
        logger.error("Machine fault: %s", exc)
        print(f"Machine fault: {exc}", file=sys.stderr)
        return 2

    sys.stdout.write(result.output_text)
    if args.dump:
        if result.output and not result.output.endswith(b"\n"):
            sys.stdout.write("\n")
        sys.stdout.write(f"{result}\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
