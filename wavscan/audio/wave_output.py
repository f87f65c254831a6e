"""WAV destination stream that interleaves independently written channels."""

import logging
import wave
from pathlib import Path
from typing import BinaryIO, Optional, Union

import numpy as np

from ..core.interfaces import AudioFormat, FrameOutputStream
from ..utils.exceptions import (
    ConfigurationError,
    FormatError,
    PreconditionViolationError,
    ResourceError,
)
from ..utils.frame_buffer import FRAME_DTYPE, ElasticFrameBuffer
from .pcm_codec import PcmFrameEncoder
from .wave_input import validate_format

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class WaveOutputStream:
    """
    Writes a multi-channel WAV file fed one channel at a time.

    Each attached channel gets its own ElasticFrameBuffer. Whenever every
    attached channel has queued samples, the common prefix is interleaved,
    encoded and appended to the file. Channels nobody writes to are filled
    with silence. The header is written eagerly by ``write_header`` and the
    frame count is patched by the wave module on close.
    """

    def __init__(self, path: PathLike, audio_format: AudioFormat, overwrite: bool = True):
        validate_format(audio_format)
        if audio_format.bits_per_sample == 8:
            raise FormatError("8-bit Wav-files store unsigned samples and are not supported for output")

        self.path = Path(path)
        self.format = audio_format
        self.encoder = PcmFrameEncoder(audio_format.bits_per_sample)

        if self.path.exists() and not overwrite:
            raise FileExistsError(f"Output file already exists: {self.path}")
        self.path.parent.mkdir(parents=True, exist_ok=True)

        self._file: Optional[BinaryIO] = None
        self._wave_file: Optional[wave.Wave_write] = None
        self._buffers: dict[int, ElasticFrameBuffer] = {}
        self._closed = False
        self.frames_written = 0

    @property
    def is_closed(self) -> bool:
        return self._closed

    def write_header(self) -> None:
        """Create the file and write its header immediately."""
        if self._wave_file is not None:
            return

        try:
            self._file = open(self.path, "wb")
        except OSError as e:
            raise ResourceError(f"Failed to create {self.path}: {e}", e) from e

        try:
            self._wave_file = wave.open(self._file, "wb")
            self._wave_file.setnchannels(self.format.channels)
            self._wave_file.setsampwidth(self.format.frame_size)
            self._wave_file.setframerate(self.format.sample_rate)
            self._wave_file.writeframesraw(b"")
            # wave buffers the header in the file object until close
            self._file.flush()
        except (OSError, wave.Error) as e:
            self._wave_file = None
            self._file.close()
            self._file = None
            raise ResourceError(f"Failed to write header to {self.path}: {e}", e) from e

        logger.info(
            f"🎵 WaveOutputStream: Created {self.path} "
            f"({self.format.sample_rate}Hz, {self.format.channels}ch, {self.format.bits_per_sample}-bit)"
        )

    def channel(self, index: int) -> "ChannelFrameWriter":
        """Attach a writer for output channel ``index``."""
        if not 0 <= index < self.format.channels:
            raise ConfigurationError(
                f"Output channel {index} out of range for {self.format.channels}-channel output"
            )
        if index in self._buffers:
            raise ConfigurationError(f"Output channel {index} already has a writer")
        if self.frames_written > 0 or any(buffer.available() for buffer in self._buffers.values()):
            raise PreconditionViolationError(
                f"Cannot attach output channel {index} after frames were written"
            )

        self._buffers[index] = ElasticFrameBuffer()
        return ChannelFrameWriter(self, index)

    def push(self, channel: int, frames: np.ndarray, count: int) -> None:
        """Queue ``count`` samples for ``channel`` and flush complete frames."""
        if self._closed:
            raise PreconditionViolationError(f"Output stream {self.path} is closed")
        if count > len(frames):
            raise PreconditionViolationError(
                f"Cannot write {count} frames from a buffer of {len(frames)}"
            )

        self._buffers[channel].push_all(frames, count)
        self._flush(min(buffer.available() for buffer in self._buffers.values()))

    def _flush(self, frame_count: int) -> None:
        if frame_count == 0:
            return
        if self._wave_file is None:
            self.write_header()

        interleaved = np.zeros((frame_count, self.format.channels), dtype=FRAME_DTYPE)
        column = np.zeros(frame_count, dtype=FRAME_DTYPE)
        for index, buffer in self._buffers.items():
            buffer.read_into(column)
            interleaved[:, index] = column

        data = self.encoder.encode(interleaved.reshape(-1))
        try:
            self._wave_file.writeframesraw(data)
        except (OSError, wave.Error) as e:
            raise ResourceError(f"Failed to write to {self.path}: {e}", e) from e

        self.frames_written += frame_count
        logger.debug(f"🎵 WaveOutputStream: Flushed {frame_count} frames to {self.path}")

    def close(self) -> None:
        """Flush pending samples, patch the header and close the file.

        Raises:
            ResourceError: If the final write or close fails
        """
        if self._closed:
            return
        self._closed = True

        pending = max((buffer.available() for buffer in self._buffers.values()), default=0)
        for index, buffer in self._buffers.items():
            missing = pending - buffer.available()
            if missing > 0:
                logger.warning(
                    f"⚠️ WaveOutputStream: Channel {index} is {missing} frames short, padding with silence"
                )
                buffer.push_all(np.zeros(missing, dtype=FRAME_DTYPE))

        try:
            try:
                self._flush(pending)
                if self._wave_file is not None:
                    self._wave_file.close()
            finally:
                # wave.open leaves caller-opened files alone
                self._wave_file = None
                if self._file is not None:
                    file, self._file = self._file, None
                    file.close()
        except (OSError, wave.Error) as e:
            raise ResourceError(f"Failed to close {self.path}: {e}", e) from e

        logger.info(f"🎵 WaveOutputStream: Closed {self.path} ({self.frames_written} frames)")


class ChannelFrameWriter(FrameOutputStream):
    """Frame sink for a single channel of a WaveOutputStream."""

    def __init__(self, output: WaveOutputStream, channel: int):
        self._output = output
        self.channel = channel
        self._closed = False

    def write_frames(self, frames: np.ndarray, count: int) -> None:
        if self._closed:
            raise PreconditionViolationError(f"Writer for output channel {self.channel} is closed")
        self._output.push(self.channel, frames, count)

    def close(self) -> None:
        # The shared file is closed by its owner
        self._closed = True
