"""
Core data models and abstract interfaces for frame streaming.

This module defines the contracts shared by the readers, writers and channel
processors that move PCM frames from a multi-channel source file to a
multi-channel destination file.

Key Interfaces:
- FrameInputStream: Produces decoded frames for one source channel
- FrameOutputStream: Accepts frames for one destination channel
- FrameStreamProcessor: Moves one chunk at a time from an input to an output

Data Models:
- AudioFormat: Format parameters of a PCM container
- ChannelOperation: One "input channel -> output channel" mapping

Example Implementation:
    class SilenceProcessor(FrameStreamProcessor):
        def prepare_operation(self) -> None:
            self._buffer = np.zeros(self.chunk_size, dtype=np.int64)

        def process_portion(self) -> int:
            read = self.input_stream.read_frames(self._buffer)
            self._buffer[:read] = 0
            self.output_stream.write_frames(self._buffer, read)
            return read
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace

import numpy as np


@dataclass(frozen=True)
class AudioFormat:
    """
    Format parameters of a PCM source or destination.

    Attributes:
        sample_rate: Frames per second per channel
        channels: Number of interleaved channels
        bits_per_sample: Sample depth (8, 16, 24 or 32)
        big_endian: Byte order; only little-endian data is processed
        signed: Whether samples are two's-complement signed integers
    """

    sample_rate: int
    channels: int
    bits_per_sample: int
    big_endian: bool = False
    signed: bool = True

    @property
    def frame_size(self) -> int:
        """Bytes per sample of a single channel."""
        return self.bits_per_sample // 8

    @property
    def block_align(self) -> int:
        """Bytes per interleaved frame across all channels."""
        return self.frame_size * self.channels

    def with_channels(self, channels: int) -> "AudioFormat":
        """Copy of this format with a different channel count."""
        return replace(self, channels=channels)


@dataclass(frozen=True)
class ChannelOperation:
    """
    A single channel mapping requested by the caller.

    Attributes:
        input_channel: Source channel index
        output_channel: Destination channel index
        adjust: Apply the adjust transform instead of copying
    """

    input_channel: int
    output_channel: int
    adjust: bool = False

    def describe(self) -> str:
        return f"{self.input_channel}-> {self.output_channel} ({'adjust' if self.adjust else 'copy'})"


class FrameInputStream(ABC):
    """Single-channel view over a PCM source."""

    @abstractmethod
    def read_frames(self, frames: np.ndarray) -> int:
        """Fill ``frames`` with up to ``len(frames)`` samples.

        Returns:
            Number of samples read; 0 once the channel is exhausted
        """

    @abstractmethod
    def frames_total(self) -> int:
        """Total frame count of the source."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying stream. Must be idempotent."""


class FrameOutputStream(ABC):
    """Single-channel view over a PCM destination."""

    @abstractmethod
    def write_frames(self, frames: np.ndarray, count: int) -> None:
        """Write the first ``count`` samples of ``frames``."""

    @abstractmethod
    def close(self) -> None:
        """Release the channel. Must be idempotent."""


class FrameStreamProcessor(ABC):
    """
    Moves frames chunk by chunk from one input channel to one output channel.

    Lifecycle:
        processor.set_chunk_size(4410)
        processor.prepare_operation()
        while processor.process_portion() > 0:
            ...
        processor.close()
    """

    def __init__(self, input_stream: FrameInputStream, output_stream: FrameOutputStream):
        self.input_stream = input_stream
        self.output_stream = output_stream
        self.chunk_size = 0

    def set_chunk_size(self, chunk_size: int) -> None:
        if chunk_size <= 0:
            raise ValueError(f"Chunk size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size

    @abstractmethod
    def prepare_operation(self) -> None:
        """One-time setup before the first chunk."""

    @abstractmethod
    def process_portion(self) -> int:
        """Process one chunk and return the number of frames handled."""

    def close(self) -> None:
        """Release input and output; output errors propagate."""
        self.input_stream.close()
        self.output_stream.close()
