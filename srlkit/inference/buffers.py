"""
srlkit/inference/buffers.py

Ping-pong buffer pair for synchronous updates.
"""

from __future__ import annotations

from typing import Generic, TypeVar

T = TypeVar("T")


class DoubleBuffer(Generic[T]):
    """
    Two buffers: readers use `current`, writers fill `next`.

    A sweep reads only from `current` and writes only to `next`; `swap`
    then publishes the sweep's results.
    """

    def __init__(self, current: T, next: T):
        if current is next:
            raise ValueError("DoubleBuffer needs two distinct buffers")
        self.current = current
        self.next = next
        self.swaps = 0

    def swap(self) -> T:
        """Exchange the buffers and return the new `current`."""
        self.current, self.next = self.next, self.current
        self.swaps += 1
        return self.current
