from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional, Tuple

from .errors import UNMATCHED_CLOSING, UNMATCHED_OPENING, CompileError

if TYPE_CHECKING:
    from .bf_interpreter import RunResult

logger = logging.getLogger(__name__)


# === Instruction Nodes ===


class Instruction:
    symbol = ""


@dataclass(frozen=True)
class Increment(Instruction):
    symbol = "+"


@dataclass(frozen=True)
class Decrement(Instruction):
    symbol = "-"


@dataclass(frozen=True)
class ShiftLeft(Instruction):
    symbol = "<"


@dataclass(frozen=True)
class ShiftRight(Instruction):
    symbol = ">"


@dataclass(frozen=True)
class Read(Instruction):
    symbol = ","


@dataclass(frozen=True)
class Write(Instruction):
    symbol = "."


@dataclass(frozen=True)
class Repeat(Instruction):
    body: Tuple[Instruction, ...]


LEAVES = {
    "+": Increment(),
    "-": Decrement(),
    "<": ShiftLeft(),
    ">": ShiftRight(),
    ",": Read(),
    ".": Write(),
}


# === Parser ===


def parse(source: str) -> "Program":
    """Parse program text into a bracket-matched instruction tree.

    Characters outside the instruction set are comments. Raises
    ``CompileError`` when brackets do not balance.
    """
    stack: List[List[Instruction]] = []
    current: List[Instruction] = []
    for char in source:
        leaf = LEAVES.get(char)
        if leaf is not None:
            current.append(leaf)
        elif char == "[":
            stack.append(current)
            current = []
        elif char == "]":
            if not stack:
                raise CompileError(UNMATCHED_CLOSING)
            body = tuple(current)
            current = stack.pop()
            current.append(Repeat(body))
    if stack:
        raise CompileError(UNMATCHED_OPENING)
    program = Program(tuple(current))
    logger.debug("Parsed %d top-level instructions from %d characters", len(program.instructions), len(source))
    return program


def flatten(instructions: Iterable[Instruction]) -> str:
    parts: List[str] = []
    # Each entry is an iterator over one body; "]" closes it when exhausted.
    stack: List[Iterator[Instruction]] = [iter(instructions)]
    while stack:
        instruction = next(stack[-1], None)
        if instruction is None:
            stack.pop()
            if stack:
                parts.append("]")
        elif isinstance(instruction, Repeat):
            parts.append("[")
            stack.append(iter(instruction.body))
        else:
            parts.append(instruction.symbol)
    return "".join(parts)


def count_instructions(instructions: Iterable[Instruction]) -> int:
    total = 0
    pending: List[Iterable[Instruction]] = [instructions]
    while pending:
        for instruction in pending.pop():
            total += 1
            if isinstance(instruction, Repeat):
                pending.append(instruction.body)
    return total


@dataclass(frozen=True)
class Program:
    instructions: Tuple[Instruction, ...]

    @classmethod
    def parse(cls, source: str) -> "Program":
        return parse(source)

    def to_source(self) -> str:
        return flatten(self.instructions)

    def __str__(self) -> str:
        return self.to_source()

    def __len__(self) -> int:
        return count_instructions(self.instructions)

    def run(
        self,
        input_data: bytes = b"",
        tape_size: int = 30000,
        max_steps: Optional[int] = None,
    ) -> "RunResult":
        from .bf_interpreter import TapeInterpreter

        interpreter = TapeInterpreter(tape_length=tape_size, max_steps=max_steps)
        return interpreter.run(self, input_data=input_data)


__all__ = [
    "Instruction",
    "Increment",
    "Decrement",
    "ShiftLeft",
    "ShiftRight",
    "Read",
    "Write",
    "Repeat",
    "Program",
    "parse",
    "flatten",
    "count_instructions",
]
