"""Growable FIFO of integer frames used to decouple producer and consumer chunk sizes."""

import logging
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)

FRAME_DTYPE = np.int64


class ElasticFrameBuffer:
    """
    Self-compacting queue of integer samples.

    Samples live in a contiguous int64 array with a logical [start, end)
    window. The window is shifted back to index 0 whenever the buffer has to
    grow or is drained into a destination array, and capacity doubles until
    the pending push fits, so queued samples are never lost or reordered.

    Example:
        buffer = ElasticFrameBuffer()
        buffer.push_all(np.array([1, 2, 3]))
        dest = np.zeros(2, dtype=np.int64)
        buffer.read_into(dest)   # -> 2, dest == [1, 2]
        buffer.read()            # -> 3
        buffer.read()            # -> None (empty)
    """

    DEFAULT_CAPACITY = 1024

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity <= 0:
            raise ValueError(f"Buffer capacity must be positive, got {capacity}")

        self._storage = np.zeros(capacity, dtype=FRAME_DTYPE)
        self._start = 0
        self._end = 0

    @property
    def capacity(self) -> int:
        return len(self._storage)

    def available(self) -> int:
        """Number of queued samples not yet read."""
        return self._end - self._start

    def __len__(self) -> int:
        return self.available()

    def push(self, value: int) -> None:
        """Append a single sample."""
        self._ensure_capacity(1)
        self._storage[self._end] = value
        self._end += 1

    def push_all(self, values, count: Optional[int] = None) -> None:
        """Append the first ``count`` samples of ``values`` (all of them by default)."""
        if count is None:
            count = len(values)
        if count == 0:
            return

        self._ensure_capacity(count)
        self._storage[self._end:self._end + count] = values[:count]
        self._end += count

    def read(self) -> Optional[int]:
        """Pop the oldest sample, or return None if the buffer is empty."""
        if self._start == self._end:
            return None

        value = int(self._storage[self._start])
        self._start += 1
        return value

    def read_into(self, dest: np.ndarray) -> int:
        """
        Move up to ``len(dest)`` samples into ``dest[0:]``.

        Returns:
            Number of samples copied; 0 when the buffer is empty.
        """
        self._compact()
        length = min(self._end, len(dest))
        if length == 0:
            return 0

        dest[:length] = self._storage[:length]
        remaining = self._end - length
        self._storage[:remaining] = self._storage[length:self._end]
        self._end = remaining
        return length

    def clear(self) -> None:
        """Drop all queued samples."""
        self._start = 0
        self._end = 0

    def _ensure_capacity(self, length: int) -> None:
        self._compact()
        required = self._end + length
        if required <= len(self._storage):
            return

        new_capacity = len(self._storage)
        while new_capacity < required:
            new_capacity *= 2

        grown = np.zeros(new_capacity, dtype=FRAME_DTYPE)
        grown[:self._end] = self._storage[:self._end]
        logger.debug(
            f"🧮 ElasticFrameBuffer: Grew from {len(self._storage)} to {new_capacity} samples"
        )
        self._storage = grown

    def _compact(self) -> None:
        if self._start == 0:
            return

        size = self._end - self._start
        self._storage[:size] = self._storage[self._start:self._end]
        self._start = 0
        self._end = size
