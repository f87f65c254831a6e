"""WAV source streams presenting interleaved PCM data as per-channel frame streams."""

import logging
import wave
from pathlib import Path
from typing import Optional, Union

import numpy as np

from ..core.interfaces import AudioFormat, FrameInputStream
from ..utils.exceptions import ConfigurationError, FormatError, ResourceError, TruncatedDataError
from ..utils.frame_buffer import ElasticFrameBuffer
from .pcm_codec import SUPPORTED_BIT_DEPTHS, PcmFrameDecoder

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def validate_format(audio_format: AudioFormat) -> None:
    """Reject formats the codec cannot process.

    Raises:
        FormatError: Naming the first violated constraint
    """
    if not audio_format.signed:
        raise FormatError("Only PCM-Signed Wav-files are supported")
    if audio_format.big_endian:
        raise FormatError("Big-Endian Wav-files are not supported")
    if audio_format.bits_per_sample not in SUPPORTED_BIT_DEPTHS:
        raise FormatError(
            f"Only 8 to 32-bit Wav-files are supported, got {audio_format.bits_per_sample}-bit"
        )
    if audio_format.channels < 1:
        raise FormatError(f"Channel count must be positive, got {audio_format.channels}")
    if audio_format.sample_rate <= 0:
        raise FormatError(f"Sample rate must be positive, got {audio_format.sample_rate}")


def _open_wave(path: PathLike) -> wave.Wave_read:
    try:
        return wave.open(str(path), "rb")
    except (wave.Error, EOFError) as e:
        raise FormatError(f"Only PCM-Signed Wav-files are supported ({path}: {e})", e) from e
    except OSError as e:
        raise ResourceError(f"Cannot open {path}: {e}", e) from e


def _format_of(wav: wave.Wave_read) -> AudioFormat:
    sample_width = wav.getsampwidth()
    return AudioFormat(
        sample_rate=wav.getframerate(),
        channels=wav.getnchannels(),
        bits_per_sample=sample_width * 8,
        big_endian=False,
        # WAV stores 8-bit samples as unsigned bytes
        signed=sample_width > 1,
    )


def read_audio_format(path: PathLike) -> tuple[AudioFormat, int]:
    """Read format and frame count from a WAV header without validating it."""
    wav = _open_wave(path)
    try:
        return _format_of(wav), wav.getnframes()
    finally:
        wav.close()


class WaveInputStream:
    """
    Sequential reader of interleaved frames from a WAV file.

    Validates the container format on open and hands out raw interleaved
    byte blocks. Channel selection happens in the frame readers built on top.
    """

    def __init__(self, path: PathLike):
        self.path = Path(path)
        self._wave_file: Optional[wave.Wave_read] = _open_wave(self.path)

        try:
            self.format = _format_of(self._wave_file)
            validate_format(self.format)
        except FormatError:
            self._wave_file.close()
            self._wave_file = None
            raise

        self.frames_total = self._wave_file.getnframes()
        self.decoder = PcmFrameDecoder(self.format.bits_per_sample)

        logger.debug(
            f"📁 WaveInputStream: Opened {self.path} "
            f"({self.format.sample_rate}Hz, {self.format.channels}ch, "
            f"{self.format.bits_per_sample}-bit, {self.frames_total} frames)"
        )

    @property
    def is_closed(self) -> bool:
        return self._wave_file is None

    def read_block(self, frame_count: int) -> np.ndarray:
        """Read up to ``frame_count`` interleaved frames and decode every sample.

        Returns:
            Flat array of ``frames_read * channels`` samples in interleaved order

        Raises:
            TruncatedDataError: If the data ends inside an interleaved frame
            ResourceError: If the underlying read fails
        """
        if self._wave_file is None:
            return np.zeros(0, dtype=np.int64)

        try:
            data = self._wave_file.readframes(frame_count)
        except (OSError, EOFError) as e:
            raise ResourceError(f"Failed to read from {self.path}: {e}", e) from e

        block_align = self.format.block_align
        if len(data) % block_align != 0:
            raise TruncatedDataError(
                f"Incomplete data in source stream {self.path}: {len(data)} bytes "
                f"is not a multiple of the {block_align}-byte frame",
                byte_count=len(data),
                frame_size=block_align,
            )
        return self.decoder.decode(data)

    def close(self) -> None:
        """Close the file; failures are logged and swallowed."""
        if self._wave_file is None:
            return

        try:
            self._wave_file.close()
        except Exception as e:
            logger.error(f"❌ WaveInputStream: Error closing {self.path}: {e}")
        finally:
            self._wave_file = None


class ChannelFrameReader(FrameInputStream):
    """Frame stream for a single channel of an interleaved WAV source."""

    def __init__(self, path: PathLike, channel: int):
        self._stream = WaveInputStream(path)
        self.format = self._stream.format

        if not 0 <= channel < self.format.channels:
            self._stream.close()
            raise ConfigurationError(
                f"Input channel {channel} out of range for {self.format.channels}-channel source {path}"
            )
        self.channel = channel

    @classmethod
    def create(cls, path: PathLike, channel: int = 0) -> "ChannelFrameReader":
        return cls(path, channel)

    def read_frames(self, frames: np.ndarray) -> int:
        samples = self._stream.read_block(len(frames))
        channel_samples = samples[self.channel::self.format.channels]
        read = len(channel_samples)
        frames[:read] = channel_samples
        return read

    def frames_total(self) -> int:
        return self._stream.frames_total

    def channel_count(self) -> int:
        return self.format.channels

    def close(self) -> None:
        self._stream.close()


class MultiChannelFrameReader:
    """
    Reads every channel of a source from one sequential pass.

    Samples of the channels that were not asked for are parked in one
    ElasticFrameBuffer per channel until that channel is read.
    """

    def __init__(self, path: PathLike):
        self._stream = WaveInputStream(path)
        self.format = self._stream.format
        self._buffers = [ElasticFrameBuffer() for _ in range(self.format.channels)]
        self._exhausted = False

    def read_frames(self, channel: int, frames: np.ndarray) -> int:
        """Fill ``frames`` with up to ``len(frames)`` samples of ``channel``."""
        if not 0 <= channel < self.format.channels:
            raise ConfigurationError(
                f"Channel {channel} out of range for {self.format.channels}-channel source"
            )

        buffer = self._buffers[channel]
        while buffer.available() < len(frames) and not self._exhausted:
            self._fill(len(frames))
        return buffer.read_into(frames)

    def _fill(self, frame_count: int) -> None:
        samples = self._stream.read_block(frame_count)
        if len(samples) == 0:
            self._exhausted = True
            return

        channels = self.format.channels
        for index, buffer in enumerate(self._buffers):
            buffer.push_all(samples[index::channels])

    def frames_total(self) -> int:
        return self._stream.frames_total

    def channel_count(self) -> int:
        return self.format.channels

    def close(self) -> None:
        self._stream.close()
