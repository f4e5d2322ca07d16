from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .allocator import SlotAllocator
from .cells import BoolCell, ByteCell
from .compiler import Program
from .emitter import TrackingEmitter, check_byte

if TYPE_CHECKING:
    from .bf_interpreter import RunResult


class CellBuilder:
    """A generation session over a tape of ``size`` cells.

    Cells handed out by ``byte`` and ``boolean`` own one slot each and emit
    their operations into this session's program text. Release them with
    ``release()`` or by using them as context managers.
    """

    def __init__(self, size: int) -> None:
        self.size = size
        self.emitter = TrackingEmitter(size)
        self.allocator = SlotAllocator(size)

    @property
    def source(self) -> str:
        return self.emitter.source

    def compile(self) -> Program:
        return self.emitter.compile()

    def run(self, input_data: bytes = b"", max_steps: Optional[int] = None) -> "RunResult":
        return self.emitter.run(input_data, max_steps=max_steps)

    def byte(self, value: int = 0) -> ByteCell:
        check_byte(value)
        cell = self.byte_uninit()
        cell.set(value)
        return cell

    def boolean(self, value: bool = False) -> BoolCell:
        cell = self.boolean_uninit()
        cell.set(value)
        return cell

    def byte_uninit(self) -> ByteCell:
        """Allocate a cell without initialising it; its content is leftover data."""
        return ByteCell(self, self.allocator.allocate())

    def boolean_uninit(self) -> BoolCell:
        return BoolCell(self.byte_uninit())


__all__ = ["CellBuilder"]
