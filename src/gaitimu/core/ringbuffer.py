from __future__ import annotations

from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """
    Fixed-size ring buffer for streaming data.
    Overwrites the oldest entries when full.
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._data: list[Optional[T]] = [None] * capacity
        self._start = 0
        self._size = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, item: T) -> Optional[T]:
        """Append ``item`` and return the evicted oldest entry, if any."""
        idx = (self._start + self._size) % self._capacity
        evicted: Optional[T] = None
        if self._size < self._capacity:
            self._size += 1
        else:
            evicted = self._data[idx]
            self._start = (self._start + 1) % self._capacity
        self._data[idx] = item
        return evicted

    def clear(self) -> None:
        self._data = [None] * self._capacity
        self._start = 0
        self._size = 0

    def __len__(self) -> int:
        return self._size
