from __future__ import annotations

import logging
from typing import List

from .errors import OUT_OF_MEMORY, MachineFault, OutOfMemory

logger = logging.getLogger(__name__)


class SlotAllocator:
    """First-fit allocator over a fixed pool of one-byte slots.

    ``_cursor`` is the earliest slot known to be free, or ``size`` once the
    pool is full.
    """

    def __init__(self, size: int) -> None:
        self.size = size
        self._occupied: List[bool] = [False] * size
        self._cursor = 0

    @property
    def live(self) -> int:
        return sum(self._occupied)

    @property
    def full(self) -> bool:
        return self._cursor >= self.size

    def is_free(self, slot: int) -> bool:
        return not self._occupied[slot]

    def occupied(self) -> List[int]:
        return [slot for slot, taken in enumerate(self._occupied) if taken]

    def allocate(self) -> int:
        if self.full:
            raise OutOfMemory(OUT_OF_MEMORY)
        slot = self._cursor
        self._occupied[slot] = True
        cursor = slot + 1
        while cursor < self.size and self._occupied[cursor]:
            cursor += 1
        self._cursor = cursor
        logger.debug("Allocated slot %d (next free %d)", slot, cursor)
        return slot

    def deallocate(self, slot: int) -> None:
        if not self._occupied[slot]:
            raise MachineFault(f"slot {slot} is not allocated")
        self._occupied[slot] = False
        self._cursor = min(self._cursor, slot)
        logger.debug("Released slot %d", slot)


__all__ = ["SlotAllocator"]
