"""
Frontier queue for the flood fill: a FIFO ring buffer of flat pixel
offsets whose capacity doubles when it is full.
"""

from __future__ import annotations


class FrontierQueue:
    """
    Growable ring buffer addressed by monotonically increasing logical
    indices; slot = index & mask.

    On growth the buffer is duplicated into both halves of the new one.
    Every pending logical index k then finds its value at k & new_mask,
    whichever half that is, so FIFO order survives the wraparound.
    """

    INITIAL_CAPACITY = 16

    def __init__(self, capacity: int = INITIAL_CAPACITY) -> None:
        if capacity < 1 or capacity & (capacity - 1):
            raise ValueError(f"capacity must be a power of two, got {capacity}")
        self._buf = [0] * capacity
        self._mask = capacity - 1
        self._head = 0  # logical index of the next offset to pop
        self._tail = 0  # logical index of the next free slot
        self.growths = 0

    def __len__(self) -> int:
        return self._tail - self._head

    def __bool__(self) -> bool:
        return self._tail > self._head

    @property
    def capacity(self) -> int:
        return self._mask + 1

    @property
    def popped(self) -> int:
        """Number of offsets dequeued so far."""
        return self._head

    def push(self, offset: int) -> None:
        if self._tail - self._head > self._mask:
            self._buf = self._buf + self._buf
            self._mask = 2 * self._mask + 1
            self.growths += 1
        self._buf[self._tail & self._mask] = offset
        self._tail += 1

    def pop(self) -> int:
        if self._tail == self._head:
            raise IndexError("pop from empty FrontierQueue")
        offset = self._buf[self._head & self._mask]
        self._head += 1
        return offset
