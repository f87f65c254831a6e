"""Little-endian signed PCM codec.

Converts between raw byte runs and int64 sample arrays for 8, 16, 24 and
32-bit two's-complement data. Every byte except the most significant one is
taken as unsigned; the most significant byte is sign-extended, which gives
correct reconstruction for all supported depths with a single code path.
"""

import logging
from typing import Optional

import numpy as np

from ..utils.exceptions import FormatError, TruncatedDataError
from ..utils.frame_buffer import FRAME_DTYPE

logger = logging.getLogger(__name__)

SUPPORTED_BIT_DEPTHS = (8, 16, 24, 32)


def signed_range(bits_per_sample: int) -> tuple[int, int]:
    """Inclusive (min, max) of a signed integer with the given bit depth."""
    return -(1 << (bits_per_sample - 1)), (1 << (bits_per_sample - 1)) - 1


def _frame_size_for(bits_per_sample: int) -> int:
    if bits_per_sample not in SUPPORTED_BIT_DEPTHS:
        raise FormatError(
            f"Unsupported bit depth: {bits_per_sample}. "
            f"Only {', '.join(str(b) for b in SUPPORTED_BIT_DEPTHS)}-bit PCM is supported"
        )
    return bits_per_sample // 8


class PcmFrameDecoder:
    """Decodes little-endian signed PCM bytes into int64 samples."""

    def __init__(self, bits_per_sample: int):
        self.bits_per_sample = bits_per_sample
        self.frame_size = _frame_size_for(bits_per_sample)

    def decode(self, data: bytes, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Decode ``data`` into samples.

        Args:
            data: Raw bytes, length must be a multiple of ``frame_size``
            out: Optional destination; must hold at least ``len(data) // frame_size`` items

        Returns:
            Array of decoded samples (``out[:n]`` when ``out`` is given)

        Raises:
            TruncatedDataError: If the byte run ends with a partial frame
        """
        if len(data) % self.frame_size != 0:
            raise TruncatedDataError(
                f"Incomplete data in source stream: {len(data)} bytes is not a "
                f"multiple of the {self.frame_size}-byte frame size",
                byte_count=len(data),
                frame_size=self.frame_size,
            )

        raw = np.frombuffer(data, dtype=np.uint8).reshape(-1, self.frame_size)
        top = self.frame_size - 1

        values = raw[:, top].view(np.int8).astype(FRAME_DTYPE) << (8 * top)
        for j in range(top):
            values += raw[:, j].astype(FRAME_DTYPE) << (8 * j)

        if out is None:
            return values

        count = len(values)
        out[:count] = values
        return out[:count]


class PcmFrameEncoder:
    """
    Encodes int64 samples into little-endian signed PCM bytes.

    Bits above the declared depth are discarded. Callers are expected to pass
    values already clamped to ``signed_range(bits_per_sample)``.
    """

    def __init__(self, bits_per_sample: int):
        self.bits_per_sample = bits_per_sample
        self.frame_size = _frame_size_for(bits_per_sample)

    def encode(self, frames, count: Optional[int] = None) -> bytes:
        """Encode the first ``count`` samples of ``frames`` (all by default)."""
        values = np.asarray(frames, dtype=FRAME_DTYPE)
        if count is not None:
            values = values[:count]

        raw = np.empty((len(values), self.frame_size), dtype=np.uint8)
        for j in range(self.frame_size):
            raw[:, j] = (values >> (8 * j)) & 0xFF
        return raw.tobytes()
