"""In-memory frame streams for testing processors without files."""

import numpy as np

from wavscan.core.interfaces import FrameInputStream, FrameOutputStream


class ListFrameInput(FrameInputStream):
    """Serves samples from a list."""

    def __init__(self, samples):
        self.samples = list(samples)
        self.position = 0
        self.read_calls = 0
        self.closed = False

    def read_frames(self, frames: np.ndarray) -> int:
        self.read_calls += 1
        chunk = self.samples[self.position:self.position + len(frames)]
        frames[:len(chunk)] = chunk
        self.position += len(chunk)
        return len(chunk)

    def frames_total(self) -> int:
        return len(self.samples)

    def close(self) -> None:
        self.closed = True


class ListFrameOutput(FrameOutputStream):
    """Collects written samples and the size of every write."""

    def __init__(self):
        self.samples = []
        self.writes = []
        self.closed = False

    def write_frames(self, frames: np.ndarray, count: int) -> None:
        self.samples.extend(int(v) for v in frames[:count])
        self.writes.append(count)

    def close(self) -> None:
        self.closed = True
