"""
File scanner driving channel processors over a PCM source.

The scanner owns every stream it opens. A run goes through the states:

    CREATED -> OPENED -> OUTPUT_CONFIGURED -> RUNNING -> CLOSED

``process()`` visits processors in operation order once per iteration so
that output channels advance in lock-step, one chunk at a time.
``calculate_statistics()`` only needs an OPENED source and reads every
channel directly without processors.

Example Usage:
    scanner = FileScanner()
    scanner.open("input.wav")
    scanner.set_output("output.wav", channels=2)
    scanner.process([ChannelOperation(0, 1), ChannelOperation(1, 0, adjust=True)], 100)
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Union

import numpy as np

from ..audio.channel_processor import GainTransform, SampleTransform, create_processor
from ..audio.statistics import FileStatistics, StatsCalculator
from ..audio.wave_input import ChannelFrameReader, MultiChannelFrameReader, read_audio_format, validate_format
from ..audio.wave_output import WaveOutputStream
from ..utils.exceptions import AudioProcessingError, ConfigurationError, PreconditionViolationError
from ..utils.frame_buffer import FRAME_DTYPE
from .interfaces import AudioFormat, ChannelOperation, FrameStreamProcessor

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ScannerState(Enum):
    """Lifecycle states of a FileScanner."""

    CREATED = "created"
    OPENED = "opened"
    OUTPUT_CONFIGURED = "output_configured"
    RUNNING = "running"
    CLOSED = "closed"


def _resolve(file_name: PathLike, folder: Optional[PathLike]) -> Path:
    return Path(folder) / file_name if folder is not None else Path(file_name)


def chunk_size_for(sample_rate: int, chunk_size_ms: int) -> int:
    """Frames per chunk for a chunk duration, truncated."""
    chunk_size = sample_rate * chunk_size_ms // 1000
    if chunk_size <= 0:
        raise ConfigurationError(
            f"Chunk duration of {chunk_size_ms}ms yields no frames at {sample_rate}Hz"
        )
    return chunk_size


class FileScanner:
    """
    Orchestrates readers, processors and the output stream for one run.

    Progress is exposed as plain attributes for polling:
        processed_frames: frames processed so far in the current run
        frames_total: total frames of the source
        iterations: loop iterations of the last run
    """

    def __init__(
        self,
        adjust_transform: Optional[SampleTransform] = None,
        adjust_gain_db: float = 0.0,
        overwrite_output: bool = True,
    ):
        self.adjust_transform = adjust_transform
        self.adjust_gain_db = adjust_gain_db
        self.overwrite_output = overwrite_output

        self.state = ScannerState.CREATED
        self.input_file: Optional[Path] = None
        self.output_file: Optional[Path] = None
        self.input_format: Optional[AudioFormat] = None
        self.output_stream: Optional[WaveOutputStream] = None

        self.frames_total = 0
        self.processed_frames = 0
        self.iterations = 0

    def __enter__(self) -> "FileScanner":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require(self, *states: ScannerState) -> None:
        if self.state not in states:
            expected = ", ".join(s.value for s in states)
            raise PreconditionViolationError(
                f"FileScanner is {self.state.value}, expected one of: {expected}"
            )

    def open(self, file_name: PathLike, folder: Optional[PathLike] = None) -> AudioFormat:
        """Open a source file and read its format.

        Raises:
            FileNotFoundError: If the file does not exist
            FormatError: If the source is not little-endian signed 8-32 bit PCM
        """
        self._require(ScannerState.CREATED, ScannerState.OPENED)

        path = _resolve(file_name, folder)
        if not path.is_file():
            raise FileNotFoundError(f"Input file not found: {path}")

        audio_format, frames_total = read_audio_format(path)
        validate_format(audio_format)

        self.input_file = path
        self.input_format = audio_format
        self.frames_total = frames_total
        self.state = ScannerState.OPENED

        logger.info(
            f"📁 FileScanner: Opened {path} ({audio_format.sample_rate}Hz, "
            f"{audio_format.channels}ch, {audio_format.bits_per_sample}-bit, {frames_total} frames)"
        )
        return audio_format

    def set_output(
        self,
        file_name: PathLike,
        channels: Optional[int] = None,
        output_format: Optional[AudioFormat] = None,
        folder: Optional[PathLike] = None,
    ) -> AudioFormat:
        """Create the output file and write its header.

        The output format is either given explicitly or copied from the source
        with ``channels`` overriding the channel count.
        """
        self._require(ScannerState.OPENED)

        if output_format is None:
            output_format = self.input_format
            if channels is not None:
                output_format = output_format.with_channels(channels)
        elif channels is not None and channels != output_format.channels:
            raise ConfigurationError(
                f"Conflicting channel counts: {channels} vs output format {output_format.channels}"
            )

        path = _resolve(file_name, folder)
        output_stream = WaveOutputStream(path, output_format, overwrite=self.overwrite_output)
        output_stream.write_header()

        self.output_file = path
        self.output_stream = output_stream
        self.state = ScannerState.OUTPUT_CONFIGURED
        return output_format

    def calculate_statistics(self, chunk_size_ms: int) -> FileStatistics:
        """Compute per-chunk mean and average delta for every source channel."""
        self._require(ScannerState.OPENED, ScannerState.OUTPUT_CONFIGURED)

        chunk_size = chunk_size_for(self.input_format.sample_rate, chunk_size_ms)
        frame_buffer = np.zeros(chunk_size, dtype=FRAME_DTYPE)
        channel_count = self.input_format.channels
        statistics = FileStatistics.for_channels(channel_count, chunk_size)

        reader = MultiChannelFrameReader(self.input_file)
        samples_total = reader.frames_total() * channel_count
        logger.info(
            f"📊 FileScanner: Calculating statistics for {channel_count} channels, chunk={chunk_size} frames"
        )

        read_total = 0
        self.iterations = 0
        try:
            while read_total < samples_total:
                read_this_round = 0
                for channel in range(channel_count):
                    read = reader.read_frames(channel, frame_buffer)
                    if read > 0:
                        calculator = StatsCalculator()
                        calculator.add_data(frame_buffer, read)
                        statistics[channel].append(calculator)
                    read_this_round += read

                read_total += read_this_round
                self.iterations += 1
                if read_this_round == 0:
                    logger.warning(
                        f"⚠️ FileScanner: Source ended after {read_total} of {samples_total} samples"
                    )
                    break
        finally:
            reader.close()

        logger.info(f"📊 FileScanner: Statistics done in {self.iterations} chunks")
        return statistics

    def process(self, operations: list[ChannelOperation], chunk_size_ms: int) -> int:
        """Run every channel operation to the end of the source, then close.

        Returns:
            Total processed frame count as reported by the progress counter
        """
        self._require(ScannerState.OUTPUT_CONFIGURED)
        if not operations:
            raise ConfigurationError("At least one channel operation is required")

        chunk_size = chunk_size_for(self.input_format.sample_rate, chunk_size_ms)
        self._log_run_info(operations)

        processors: list[FrameStreamProcessor] = []
        self.state = ScannerState.RUNNING
        try:
            for operation in operations:
                processors.append(self._create_processor(operation, chunk_size))

            self._run(processors)
        except Exception:
            # Keep the run failure as the error the caller sees
            try:
                self._close_processors(processors)
                self.close()
            except AudioProcessingError as close_error:
                logger.error(f"❌ FileScanner: Cleanup after failed run also failed: {close_error}")
            raise

        self._close_processors(processors)
        self.close()

        logger.info(
            f"✅ FileScanner: Processed {self.processed_frames}/{self.frames_total} frames "
            f"in {self.iterations} chunks"
        )
        return self.processed_frames

    def _create_processor(self, operation: ChannelOperation, chunk_size: int) -> FrameStreamProcessor:
        reader = ChannelFrameReader.create(self.input_file, operation.input_channel)
        try:
            writer = self.output_stream.channel(operation.output_channel)
            self.frames_total = reader.frames_total()

            transform = self.adjust_transform
            if operation.adjust and transform is None:
                transform = GainTransform(self.adjust_gain_db, self.output_stream.format.bits_per_sample)
            return create_processor(operation, reader, writer, chunk_size, transform)
        except Exception:
            reader.close()
            raise

    def _run(self, processors: list[FrameStreamProcessor]) -> None:
        self.processed_frames = 0
        self.iterations = 0

        while self.processed_frames < self.frames_total:
            processed = 0
            # Order matters: output channels are interleaved in this order
            for processor in processors:
                processed = processor.process_portion()

            self.processed_frames += processed
            self.iterations += 1
            logger.debug(f"🔄 FileScanner: Chunk {self.iterations}, {self.processed_frames}/{self.frames_total}")

            if processed == 0:
                logger.warning(
                    f"⚠️ FileScanner: No progress after {self.processed_frames} of {self.frames_total} frames, stopping"
                )
                break

    def _log_run_info(self, operations: list[ChannelOperation]) -> None:
        logger.info(f"📁 FileScanner: Input file: {self.input_file.resolve()}")
        logger.info(f"📁 FileScanner: Output file: {self.output_file.resolve()}")
        for operation in operations:
            logger.info(f"🔀 FileScanner: {operation.describe()}")

    @staticmethod
    def _close_processors(processors: list[FrameStreamProcessor]) -> None:
        for processor in processors:
            processor.close()

    def close(self) -> None:
        """Close the output stream. Errors propagate; safe to call twice."""
        if self.state == ScannerState.CLOSED:
            return

        output_stream = self.output_stream
        self.state = ScannerState.CLOSED
        if output_stream is not None:
            output_stream.close()
