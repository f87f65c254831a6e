"""Channel processors moving one chunk at a time from a source channel to an output channel.

Two variants are provided:
- FrameStreamCopier: sample-for-sample passthrough
- FrameStreamAdjuster: applies a per-sample transform (gain by default)
"""

import logging
from typing import Callable, Optional

import numpy as np

from ..core.interfaces import ChannelOperation, FrameInputStream, FrameOutputStream, FrameStreamProcessor
from ..utils.exceptions import PreconditionViolationError
from ..utils.frame_buffer import FRAME_DTYPE, ElasticFrameBuffer
from .pcm_codec import signed_range

logger = logging.getLogger(__name__)

SampleTransform = Callable[[int], int]


class GainTransform:
    """Scales samples by a gain in dB and clamps them to the output depth."""

    def __init__(self, gain_db: float = 0.0, bits_per_sample: int = 16):
        self.gain_db = gain_db
        self.factor = 10 ** (gain_db / 20)
        self.min_value, self.max_value = signed_range(bits_per_sample)

    def __call__(self, sample: int) -> int:
        value = round(sample * self.factor)
        return max(self.min_value, min(self.max_value, value))

    def __repr__(self) -> str:
        return f"GainTransform(gain_db={self.gain_db})"


class FrameStreamCopier(FrameStreamProcessor):
    """Copies a source channel to an output channel unchanged."""

    def __init__(self, input_stream: FrameInputStream, output_stream: FrameOutputStream):
        super().__init__(input_stream, output_stream)
        self._frames: Optional[np.ndarray] = None

    def prepare_operation(self) -> None:
        if self.chunk_size <= 0:
            raise PreconditionViolationError("Chunk size must be set before prepare_operation()")
        self._frames = np.zeros(self.chunk_size, dtype=FRAME_DTYPE)

    def process_portion(self) -> int:
        if self._frames is None:
            raise PreconditionViolationError("prepare_operation() must be called before process_portion()")

        read = self.input_stream.read_frames(self._frames)
        if read > 0:
            self.output_stream.write_frames(self._frames, read)
        return read


class FrameStreamAdjuster(FrameStreamProcessor):
    """
    Applies a sample transform between reading and writing.

    The transform is called exactly once per sample, in stream order. Its
    results are staged in an ElasticFrameBuffer and drained into a
    chunk-sized output array before being written.
    """

    def __init__(
        self,
        input_stream: FrameInputStream,
        output_stream: FrameOutputStream,
        transform: Optional[SampleTransform] = None,
    ):
        super().__init__(input_stream, output_stream)
        self.transform = transform or GainTransform()
        self._frames: Optional[np.ndarray] = None
        self._adjusted: Optional[np.ndarray] = None
        self._staging: Optional[ElasticFrameBuffer] = None

    def prepare_operation(self) -> None:
        if self.chunk_size <= 0:
            raise PreconditionViolationError("Chunk size must be set before prepare_operation()")
        self._frames = np.zeros(self.chunk_size, dtype=FRAME_DTYPE)
        self._adjusted = np.zeros(self.chunk_size, dtype=FRAME_DTYPE)
        self._staging = ElasticFrameBuffer(self.chunk_size)
        logger.debug(f"🎚️ FrameStreamAdjuster: Prepared with {self.transform!r}, chunk={self.chunk_size}")

    def process_portion(self) -> int:
        if self._frames is None:
            raise PreconditionViolationError("prepare_operation() must be called before process_portion()")

        read = self.input_stream.read_frames(self._frames)
        for i in range(read):
            self._staging.push(self.transform(int(self._frames[i])))

        written = self._staging.read_into(self._adjusted[:read])
        if written > 0:
            self.output_stream.write_frames(self._adjusted, written)
        return read


def create_processor(
    operation: ChannelOperation,
    input_stream: FrameInputStream,
    output_stream: FrameOutputStream,
    chunk_size: int,
    transform: Optional[SampleTransform] = None,
) -> FrameStreamProcessor:
    """Build and prepare the processor variant an operation asks for."""
    if operation.adjust:
        processor = FrameStreamAdjuster(input_stream, output_stream, transform)
    else:
        processor = FrameStreamCopier(input_stream, output_stream)

    processor.set_chunk_size(chunk_size)
    processor.prepare_operation()
    return processor
