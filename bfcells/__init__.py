from .allocator import SlotAllocator
from .bf_interpreter import RunResult, TapeInterpreter
from .builder import CellBuilder
from .cells import BoolCell, ByteCell
from .compiler import Program, parse
from .emitter import Emitter, TrackingEmitter
from .errors import (
    CompileError,
    EmptyTape,
    MachineFault,
    OutOfMemory,
    PointerDrift,
    PointerOutOfRange,
    ReleasedCellError,
    StepLimitExceeded,
)

__all__ = [
    "BoolCell",
    "ByteCell",
    "CellBuilder",
    "CompileError",
    "Emitter",
    "EmptyTape",
    "MachineFault",
    "OutOfMemory",
    "PointerDrift",
    "PointerOutOfRange",
    "Program",
    "ReleasedCellError",
    "RunResult",
    "SlotAllocator",
    "StepLimitExceeded",
    "TapeInterpreter",
    "TrackingEmitter",
    "parse",
]
