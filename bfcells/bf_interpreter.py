from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Iterable, List, Optional, Sequence, Tuple, Union

from .compiler import (
    Decrement,
    Increment,
    Instruction,
    Program,
    Read,
    Repeat,
    ShiftLeft,
    ShiftRight,
    Write,
    parse,
)
from .errors import EMPTY_TAPE, POINTER_DRIFT, EmptyTape, PointerDrift, StepLimitExceeded

logger = logging.getLogger(__name__)

DEFAULT_TAPE_LENGTH = 30000
DEFAULT_TAPE_WINDOW = 8


@dataclass(frozen=True)
class RunResult:
    tape: bytes
    pointer: int
    input: bytes
    output: bytes
    steps: int

    @property
    def output_text(self) -> str:
        return self.output.decode("latin-1")

    def window(self, width: int = DEFAULT_TAPE_WINDOW) -> Tuple[int, bytes]:
        """Return ``(start, cells)`` for the cells around the pointer."""
        start = max(0, self.pointer - width)
        end = min(len(self.tape), self.pointer + width)
        return start, self.tape[start:end]

    def format_tape(self, width: int = DEFAULT_TAPE_WINDOW) -> str:
        start, cells = self.window(width)
        parts: List[str] = []
        for offset, value in enumerate(cells):
            if start + offset == self.pointer:
                parts.append(f"<{value:02X}>")
            else:
                parts.append(f"{value:02X}")
        return " ".join(parts)

    def __str__(self) -> str:
        return (
            f"tape={self.format_tape()} pointer={self.pointer} "
            f"input={self.input!r} output={self.output!r}"
        )


@dataclass
class TapeInterpreter:
    tape_length: int = DEFAULT_TAPE_LENGTH
    max_steps: Optional[int] = None

    tape: bytearray = field(init=False, repr=False)
    pointer: int = field(init=False, repr=False)
    input_queue: Deque[int] = field(init=False, repr=False)
    output_buffer: bytearray = field(init=False, repr=False)
    steps: int = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.tape_length < 1:
            raise EmptyTape(EMPTY_TAPE)
        self.reset()

    def reset(self, input_data: Iterable[int] = ()) -> None:
        self.tape = bytearray(self.tape_length)
        self.pointer = 0
        self.input_queue = deque(bytes(input_data))
        self.output_buffer = bytearray()
        self.steps = 0

    def run(
        self,
        program: Union[Program, str],
        input_data: Iterable[int] = b"",
    ) -> RunResult:
        if isinstance(program, str):
            program = parse(program)
        self.reset(input_data)
        self._execute(program.instructions)
        logger.debug(
            "Program finished after %d steps with %d output bytes",
            self.steps,
            len(self.output_buffer),
        )
        return self.result()

    def result(self) -> RunResult:
        return RunResult(
            tape=bytes(self.tape),
            pointer=self.pointer,
            input=bytes(self.input_queue),
            output=bytes(self.output_buffer),
            steps=self.steps,
        )

    def _tick(self) -> None:
        self.steps += 1
        if self.max_steps is not None and self.steps > self.max_steps:
            raise StepLimitExceeded("Program exceeded allowed step count")

    def _execute(self, instructions: Sequence[Instruction]) -> None:
        # Frames are [body, next index, loop start pointer]; the outermost has no loop.
        frames: List[list] = [[instructions, 0, None]]
        while frames:
            frame = frames[-1]
            body, index, start = frame
            if index == len(body):
                if start is None:
                    frames.pop()
                    continue
                if self.pointer != start:
                    raise PointerDrift(POINTER_DRIFT)
                self._tick()
                if self.tape[self.pointer] != 0:
                    frame[1] = 0
                else:
                    frames.pop()
                continue
            instruction = body[index]
            frame[1] = index + 1
            self._tick()
            kind = type(instruction)
            if kind is Increment:
                self.tape[self.pointer] = (self.tape[self.pointer] + 1) & 0xFF
            elif kind is Decrement:
                self.tape[self.pointer] = (self.tape[self.pointer] - 1) & 0xFF
            elif kind is ShiftRight:
                self.pointer = (self.pointer + 1) % self.tape_length
            elif kind is ShiftLeft:
                self.pointer = (self.pointer - 1) % self.tape_length
            elif kind is Write:
                self.output_buffer.append(self.tape[self.pointer])
            elif kind is Read:
                self.tape[self.pointer] = self.input_queue.popleft() if self.input_queue else 0
            elif kind is Repeat:
                if self.tape[self.pointer] != 0:
                    frames.append([instruction.body, 0, self.pointer])


__all__ = [
    "DEFAULT_TAPE_LENGTH",
    "RunResult",
    "TapeInterpreter",
]
