"""Per-chunk level statistics."""

from dataclasses import dataclass, field
from typing import Any

import numpy as np


def _truncating_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(numerator) // denominator
    return -quotient if numerator < 0 else quotient


class StatsCalculator:
    """Summarises one chunk of samples as a mean and an average absolute delta.

    Both values are truncated toward zero. A fresh calculator is used for
    every chunk of every channel.
    """

    def __init__(self):
        self._count = 0
        self._total = 0
        self._delta_total = 0

    def add_data(self, frames: np.ndarray, count: int) -> None:
        samples = np.asarray(frames[:count], dtype=np.int64)
        if len(samples) == 0:
            return

        self._total += int(samples.sum())
        self._delta_total += int(np.abs(np.diff(samples)).sum())
        self._count += len(samples)

    def get_math_meaning(self) -> int:
        """Truncated mean of the samples."""
        if self._count == 0:
            return 0
        return _truncating_div(self._total, self._count)

    def get_average_delta(self) -> int:
        """Truncated mean of |x[i] - x[i-1]|; 0 for fewer than two samples."""
        if self._count <= 1:
            return 0
        return _truncating_div(self._delta_total, self._count - 1)


@dataclass
class ChannelStatistics:
    """Chunk summaries of one channel, in chunk order."""

    channel: int
    means: list[int] = field(default_factory=list)
    average_deltas: list[int] = field(default_factory=list)

    def append(self, calculator: StatsCalculator) -> None:
        self.means.append(calculator.get_math_meaning())
        self.average_deltas.append(calculator.get_average_delta())

    def __len__(self) -> int:
        return len(self.means)


@dataclass
class FileStatistics:
    """Statistics result for a whole file."""

    chunk_size: int
    channels: list[ChannelStatistics] = field(default_factory=list)

    @classmethod
    def for_channels(cls, channel_count: int, chunk_size: int) -> "FileStatistics":
        return cls(chunk_size=chunk_size, channels=[ChannelStatistics(channel=i) for i in range(channel_count)])

    def __getitem__(self, channel: int) -> ChannelStatistics:
        return self.channels[channel]

    def to_dict(self) -> dict[str, Any]:
        return {
            "chunk_size": self.chunk_size,
            "channels": [
                {"channel": c.channel, "means": list(c.means), "average_deltas": list(c.average_deltas)}
                for c in self.channels
            ],
        }
