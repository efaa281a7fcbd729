"""Reusable scratch space for frame payloads."""

from __future__ import annotations


class ScratchBuffer:
    """
    Byte buffer owned by one reader or writer, reused across frames.

    The buffer grows to the largest size requested so far and never shrinks.
    It never grows beyond `limit`, the protocol ceiling for what it holds.

    Growth allocates a fresh `bytearray` instead of resizing in place, so a
    `memoryview` handed out earlier stays valid (resizing an exported
    bytearray raises `BufferError`).
    """

    def __init__(self, limit: int, initial_size: int = 4096) -> None:
        self._limit = limit
        self._buf = bytearray(min(initial_size, limit))

    @property
    def limit(self) -> int:
        """Maximum capacity in bytes."""
        return self._limit

    @property
    def capacity(self) -> int:
        """Currently allocated bytes."""
        return len(self._buf)

    def reserve(self, size: int) -> None:
        """
        Make sure at least `size` bytes are allocated.

        Raises:
            ValueError: If `size` is negative or above the limit.
        """
        if size < 0 or size > self._limit:
            raise ValueError(f"Scratch request of {size} bytes outside [0, {self._limit}]")
        if size > len(self._buf):
            # Double to amortise growth, but stay under the ceiling.
            self._buf = bytearray(min(max(size, 2 * len(self._buf)), self._limit))

    def view(self, size: int) -> memoryview:
        """Return a writable view of exactly `size` bytes."""
        self.reserve(size)
        return memoryview(self._buf)[:size]
