from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional, Sequence, Union

from .emitter import TrackingEmitter, check_byte
from .errors import MachineFault, ReleasedCellError

if TYPE_CHECKING:
    from .builder import CellBuilder


Operand = Union["ByteCell", int]


class ByteCell:
    """A handle owning one tape slot that holds an unsigned 8-bit value.

    Operations do not compute anything at generation time; they emit the
    instructions that perform the computation when the program runs.
    """

    def __init__(self, builder: "CellBuilder", slot: int) -> None:
        self._builder = builder
        self._slot: Optional[int] = slot

    def __repr__(self) -> str:
        return f"ByteCell(slot={self._slot})"

    def __enter__(self) -> "ByteCell":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    @property
    def builder(self) -> "CellBuilder":
        return self._builder

    @property
    def slot(self) -> int:
        if self._slot is None:
            raise ReleasedCellError("cell has already been released")
        return self._slot

    @property
    def released(self) -> bool:
        return self._slot is None

    def release(self) -> None:
        """Return the slot to the allocator. Later calls do nothing."""
        if self._slot is None:
            return
        slot = self._slot
        self._slot = None
        self._builder.allocator.deallocate(slot)

    # --- Helpers ---

    def _goto(self) -> TrackingEmitter:
        emitter = self._builder.emitter
        emitter.move_to(self.slot)
        return emitter

    def _check_operand(self, other: "ByteCell") -> None:
        if other._builder is not self._builder:
            raise ValueError("Cells belong to different builders")
        if other is self or other.slot == self.slot:
            raise ValueError("Operation needs two distinct cells")

    def _add(self, other: Operand) -> None:
        if isinstance(other, ByteCell):
            with other.copy() as addend:
                self.add_and_zero(addend)
        else:
            self.add_constant(other)

    def _subtract(self, other: Operand) -> None:
        if isinstance(other, ByteCell):
            with other.copy() as subtrahend:
                self.sub_and_zero(subtrahend)
        else:
            self.sub_constant(other)

    # --- Primitives ---

    def read(self) -> None:
        self._goto().read()

    def write(self) -> None:
        self._goto().write()

    def zero(self) -> None:
        self._goto().zero()

    def set(self, value: int) -> None:
        self._goto().set(check_byte(value))

    def inc(self) -> None:
        self._goto().inc()

    def dec(self) -> None:
        self._goto().dec()

    def add_constant(self, value: int) -> None:
        self._goto().add(check_byte(value))

    def sub_constant(self, value: int) -> None:
        self._goto().subtract(check_byte(value))

    def while_nonzero(self, body: Callable[["ByteCell"], None]) -> None:
        """Repeat ``body`` while this cell is nonzero.

        The pointer rests on this cell at the start of every iteration, so
        the body may freely touch other cells.
        """
        self._builder.emitter.repeat_at(self.slot, lambda _emitter: body(self))

    # --- Data movement ---

    def move_into(self, *destinations: "ByteCell") -> None:
        """Move this value into every destination, leaving a 0 behind."""
        for destination in destinations:
            self._check_operand(destination)
        for destination in destinations:
            destination.zero()
        self._spread(destinations)

    def _spread(self, destinations: Sequence["ByteCell"]) -> None:
        def _step(cell: ByteCell) -> None:
            cell.dec()
            for destination in destinations:
                destination.inc()

        self.while_nonzero(_step)

    def move_from(self, other: "ByteCell") -> None:
        other.move_into(self)

    def copy_into(self, other: "ByteCell") -> None:
        self._check_operand(other)
        with self._builder.byte_uninit() as temp:
            self.move_into(temp)
            other.zero()
            temp._spread((self, other))

    def copy_from(self, other: "ByteCell") -> None:
        other.copy_into(self)

    def copy(self) -> "ByteCell":
        output = self._builder.byte_uninit()
        try:
            self.copy_into(output)
        except MachineFault:
            output.release()
            raise
        return output

    # --- Arithmetic ---

    def add_and_zero(self, other: "ByteCell") -> None:
        """Add ``other`` into this cell, zeroing ``other``."""
        self._check_operand(other)

        def _step(cell: ByteCell) -> None:
            self.inc()
            cell.dec()

        other.while_nonzero(_step)

    def sub_and_zero(self, other: "ByteCell") -> None:
        """Subtract ``other`` from this cell, zeroing ``other``."""
        self._check_operand(other)

        def _step(cell: ByteCell) -> None:
            self.dec()
            cell.dec()

        other.while_nonzero(_step)

    def multiply_assign(self, other: Operand) -> None:
        """Multiply in place by repeated addition; ``other`` is unchanged.

        Run time grows with the product of both values.
        """
        if not isinstance(other, ByteCell):
            with self._builder.byte(other) as factor:
                self.multiply_assign(factor)
            return
        if other is self:
            with self.copy() as factor:
                self.multiply_assign(factor)
            return
        self._check_operand(other)

        def _step(counter: ByteCell) -> None:
            counter.dec()
            with other.copy() as addend:
                self.add_and_zero(addend)

        with self._builder.byte_uninit() as counter:
            self.move_into(counter)
            counter.while_nonzero(_step)

    # --- Tests ---

    def is_nonzero(self) -> "BoolCell":
        """Consume this cell, producing a boolean that is true if it was nonzero."""
        output = self._builder.boolean(False)

        def _step(cell: ByteCell) -> None:
            cell.zero()
            output._cell.inc()

        self.while_nonzero(_step)
        self.release()
        return output

    def is_zero(self) -> "BoolCell":
        """Consume this cell, producing a boolean that is true if it was zero."""
        output = self._builder.boolean(True)

        def _step(cell: ByteCell) -> None:
            cell.zero()
            output._cell.dec()

        self.while_nonzero(_step)
        self.release()
        return output

    def eq(self, other: Operand) -> "BoolCell":
        scratch = self.copy()
        scratch._subtract(other)
        return scratch.is_zero()

    def ne(self, other: Operand) -> "BoolCell":
        scratch = self.copy()
        scratch._subtract(other)
        return scratch.is_nonzero()

    # --- Operators ---

    def __iadd__(self, other: Operand) -> "ByteCell":
        self._add(other)
        return self

    def __isub__(self, other: Operand) -> "ByteCell":
        self._subtract(other)
        return self

    def __imul__(self, other: Operand) -> "ByteCell":
        self.multiply_assign(other)
        return self

    def __add__(self, other: Operand) -> "ByteCell":
        if not isinstance(other, (ByteCell, int)):
            return NotImplemented
        output = self.copy()
        output += other
        return output

    __radd__ = __add__

    def __sub__(self, other: Operand) -> "ByteCell":
        if not isinstance(other, (ByteCell, int)):
            return NotImplemented
        output = self.copy()
        output -= other
        return output

    def __rsub__(self, other: int) -> "ByteCell":
        if not isinstance(other, int):
            return NotImplemented
        output = self._builder.byte(other)
        output -= self
        return output

    def __mul__(self, other: Operand) -> "ByteCell":
        if not isinstance(other, (ByteCell, int)):
            return NotImplemented
        output = self.copy()
        output *= other
        return output

    __rmul__ = __mul__

    def __neg__(self) -> "ByteCell":
        output = self._builder.byte(0)
        output -= self
        return output


class BoolCell:
    """A handle whose slot holds 0 or 1 between operations."""

    def __init__(self, cell: ByteCell) -> None:
        self._cell = cell

    def __repr__(self) -> str:
        return f"BoolCell(slot={self._cell._slot})"

    def __enter__(self) -> "BoolCell":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    @property
    def builder(self) -> "CellBuilder":
        return self._cell.builder

    @property
    def slot(self) -> int:
        return self._cell.slot

    @property
    def released(self) -> bool:
        return self._cell.released

    def release(self) -> None:
        self._cell.release()

    def set(self, value: bool) -> None:
        self._cell.set(1 if value else 0)

    def write(self) -> None:
        self._cell.write()

    def copy(self) -> "BoolCell":
        return BoolCell(self._cell.copy())

    def copy_into(self, other: "BoolCell") -> None:
        self._cell.copy_into(other._cell)

    def copy_from(self, other: "BoolCell") -> None:
        other.copy_into(self)

    def move_into(self, *destinations: "BoolCell") -> None:
        self._cell.move_into(*(destination._cell for destination in destinations))

    def move_from(self, other: "BoolCell") -> None:
        other.move_into(self)

    # --- Control flow ---

    def while_true(self, body: Callable[["BoolCell"], None]) -> None:
        self._cell.while_nonzero(lambda _cell: body(self))

    def if_true(self, body: Callable[["BoolCell"], None]) -> None:
        """Run ``body`` once if this cell is true. The cell is false afterwards."""

        def _once(cell: ByteCell) -> None:
            body(self)
            cell.zero()

        self._cell.while_nonzero(_once)

    # --- Logic ---

    def negate(self) -> None:
        with self._cell.copy() as previous:
            self._cell.set(1)
            self._cell.sub_and_zero(previous)

    def and_assign(self, other: "BoolCell") -> None:
        # 1 - 1 leaves the scratch at 0; 0 - 1 wraps to 255 and enters the loop.
        with other._cell.copy() as scratch:
            scratch.dec()

            def _clear(cell: ByteCell) -> None:
                self._cell.zero()
                cell.zero()

            scratch.while_nonzero(_clear)

    def or_assign(self, other: "BoolCell") -> None:
        with other._cell.copy() as scratch:
            scratch.add_and_zero(self._cell)

            def _clamp(cell: ByteCell) -> None:
                self._cell.inc()
                cell.zero()

            scratch.while_nonzero(_clamp)

    def xor_assign(self, other: "BoolCell") -> None:
        with other.copy() as scratch:
            scratch.if_true(lambda _scratch: self.negate())

    def __invert__(self) -> "BoolCell":
        output = self._cell.builder.boolean(True)
        with self._cell.copy() as previous:
            output._cell.sub_and_zero(previous)
        return output

    def __iand__(self, other: "BoolCell") -> "BoolCell":
        self.and_assign(other)
        return self

    def __ior__(self, other: "BoolCell") -> "BoolCell":
        self.or_assign(other)
        return self

    def __ixor__(self, other: "BoolCell") -> "BoolCell":
        self.xor_assign(other)
        return self

    def __and__(self, other: "BoolCell") -> "BoolCell":
        if not isinstance(other, BoolCell):
            return NotImplemented
        output = self.copy()
        output &= other
        return output

    def __or__(self, other: "BoolCell") -> "BoolCell":
        if not isinstance(other, BoolCell):
            return NotImplemented
        output = self.copy()
        output |= other
        return output

    def __xor__(self, other: "BoolCell") -> "BoolCell":
        if not isinstance(other, BoolCell):
            return NotImplemented
        output = self.copy()
        output ^= other
        return output


__all__ = ["ByteCell", "BoolCell"]
