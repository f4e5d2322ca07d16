from __future__ import annotations

from typing import TYPE_CHECKING, Callable, List, Optional

from .compiler import Program, parse
from .errors import POINTER_DRIFT, POINTER_OUT_OF_RANGE, PointerDrift, PointerOutOfRange

if TYPE_CHECKING:
    from .bf_interpreter import RunResult


# Above this a wrapping run in the opposite direction is shorter.
WRAP_THRESHOLD = 128


def check_byte(value: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"Expected an integer byte value, got {value!r}")
    if not (0 <= value <= 255):
        raise ValueError(f"Byte value out of range 0-255: {value}")
    return value


class Emitter:
    """Accumulates a flat stream of tape machine instructions."""

    def __init__(self) -> None:
        self._chunks: List[str] = []

    @property
    def source(self) -> str:
        return "".join(self._chunks)

    def compile(self) -> Program:
        return parse(self.source)

    def inc(self) -> None:
        self._chunks.append("+")

    def dec(self) -> None:
        self._chunks.append("-")

    def shl(self) -> None:
        self._chunks.append("<")

    def shr(self) -> None:
        self._chunks.append(">")

    def read(self) -> None:
        self._chunks.append(",")

    def write(self) -> None:
        self._chunks.append(".")

    def add(self, value: int) -> None:
        """Add a constant to the current cell with the fewest instructions."""
        value = check_byte(value)
        if value > WRAP_THRESHOLD:
            self._chunks.append("-" * (256 - value))
        else:
            self._chunks.append("+" * value)

    def subtract(self, value: int) -> None:
        value = check_byte(value)
        if value > WRAP_THRESHOLD:
            self._chunks.append("+" * (256 - value))
        else:
            self._chunks.append("-" * value)

    def begin_repeat(self) -> None:
        self._chunks.append("[")

    def end_repeat(self) -> None:
        self._chunks.append("]")

    def repeat(self, body: Callable[["Emitter"], None]) -> None:
        self.begin_repeat()
        body(self)
        self.end_repeat()


class TrackingEmitter:
    """Emitter that knows which slot the machine pointer rests on.

    The tracked ``index`` must always agree with the interpreter's pointer
    when the generated program runs. Every loop emitted through this class
    is pointer neutral: the index on ``]`` equals the index on ``[``.
    """

    def __init__(self, size: int) -> None:
        self.size = size
        self.index = 0
        self._emitter = Emitter()

    @property
    def source(self) -> str:
        return self._emitter.source

    def compile(self) -> Program:
        return self._emitter.compile()

    def run(self, input_data: bytes = b"", max_steps: Optional[int] = None) -> "RunResult":
        return self.compile().run(input_data, tape_size=self.size, max_steps=max_steps)

    def inc(self) -> None:
        self._emitter.inc()

    def dec(self) -> None:
        self._emitter.dec()

    def add(self, value: int) -> None:
        self._emitter.add(value)

    def subtract(self, value: int) -> None:
        self._emitter.subtract(value)

    def read(self) -> None:
        self._emitter.read()

    def write(self) -> None:
        self._emitter.write()

    def zero(self) -> None:
        self._emitter.repeat(lambda emitter: emitter.dec())

    def set(self, value: int) -> None:
        self.zero()
        self.add(value)

    def move_to(self, target: int) -> None:
        # Linear distance only; the machine wraps but travel never does.
        if target >= self.size or target < 0:
            raise PointerOutOfRange(POINTER_OUT_OF_RANGE)
        if target < self.index:
            for _ in range(self.index - target):
                self._emitter.shl()
        else:
            for _ in range(target - self.index):
                self._emitter.shr()
        self.index = target

    def repeat(self, body: Callable[["TrackingEmitter"], None]) -> None:
        start = self.index
        self._emitter.begin_repeat()
        body(self)
        self._emitter.end_repeat()
        if self.index != start:
            raise PointerDrift(POINTER_DRIFT)

    def repeat_at(self, slot: int, body: Callable[["TrackingEmitter"], None]) -> None:
        """Loop while ``slot`` is nonzero; the pointer rests on ``slot`` at
        the start of every iteration."""

        def _body(emitter: TrackingEmitter) -> None:
            body(emitter)
            emitter.move_to(slot)

        self.move_to(slot)
        self.repeat(_body)


__all__ = ["Emitter", "TrackingEmitter", "check_byte"]
