import random
import unittest

from bfcells import MachineFault, OutOfMemory, SlotAllocator


class SlotAllocatorTests(unittest.TestCase):
    def test_allocates_in_order(self) -> None:
        allocator = SlotAllocator(4)
        self.assertEqual([allocator.allocate() for _ in range(3)], [0, 1, 2])
        self.assertEqual(allocator.live, 3)

    def test_reuses_lowest_released_slot(self) -> None:
        allocator = SlotAllocator(5)
        for _ in range(4):
            allocator.allocate()
        allocator.deallocate(2)
        allocator.deallocate(1)
        self.assertEqual(allocator.allocate(), 1)
        self.assertEqual(allocator.allocate(), 2)
        self.assertEqual(allocator.allocate(), 4)

    def test_last_slot_can_be_used(self) -> None:
        allocator = SlotAllocator(2)
        allocator.allocate()
        self.assertEqual(allocator.allocate(), 1)
        self.assertTrue(allocator.full)

    def test_out_of_memory(self) -> None:
        allocator = SlotAllocator(2)
        allocator.allocate()
        allocator.allocate()
        with self.assertRaises(OutOfMemory) as ctx:
            allocator.allocate()
        self.assertEqual(str(ctx.exception), "out of memory")

    def test_release_after_full_frees_space(self) -> None:
        allocator = SlotAllocator(2)
        allocator.allocate()
        allocator.allocate()
        allocator.deallocate(0)
        self.assertFalse(allocator.full)
        self.assertEqual(allocator.allocate(), 0)

    def test_double_release_is_a_fault(self) -> None:
        allocator = SlotAllocator(3)
        slot = allocator.allocate()
        allocator.deallocate(slot)
        with self.assertRaises(MachineFault):
            allocator.deallocate(slot)

    def test_random_interleavings_never_share_slots(self) -> None:
        rng = random.Random(7)
        size = 8
        allocator = SlotAllocator(size)
        live = set()
        for _ in range(2000):
            if live and (len(live) == size or rng.random() < 0.45):
                slot = rng.choice(sorted(live))
                allocator.deallocate(slot)
                live.remove(slot)
            else:
                expected = min(set(range(size)) - live)
                slot = allocator.allocate()
                self.assertEqual(slot, expected)
                self.assertNotIn(slot, live)
                live.add(slot)
            self.assertLessEqual(len(live), size)
            self.assertEqual(allocator.live, len(live))
            self.assertEqual(allocator.occupied(), sorted(live))


if __name__ == "__main__":
    unittest.main()
