from __future__ import annotations


class CompileError(Exception):
    """Raised when program text has malformed bracket structure."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class MachineFault(RuntimeError):
    """An internal invariant of the generator or machine was broken.

    These indicate a defect in the calling code rather than bad input and are
    never caught inside the library.
    """


class OutOfMemory(MachineFault):
    pass


class PointerOutOfRange(MachineFault):
    pass


class PointerDrift(MachineFault):
    pass


class EmptyTape(MachineFault):
    pass


class ReleasedCellError(MachineFault):
    pass


class StepLimitExceeded(RuntimeError):
    """Raised when execution exceeds the configured step budget."""


UNMATCHED_CLOSING = "unmatched closing bracket"
UNMATCHED_OPENING = "unmatched opening bracket"
OUT_OF_MEMORY = "out of memory"
POINTER_OUT_OF_RANGE = "pointer index cannot be larger than N"
POINTER_DRIFT = "the pointer index unexpectedly changed in a repeat loop"
EMPTY_TAPE = "cannot make a tape of size 0"


__all__ = [
    "CompileError",
    "MachineFault",
    "OutOfMemory",
    "PointerOutOfRange",
    "PointerDrift",
    "EmptyTape",
    "ReleasedCellError",
    "StepLimitExceeded",
]
