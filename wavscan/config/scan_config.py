"""Configuration for scan runs and parsing of channel operations."""

import logging
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List

from ..core.interfaces import ChannelOperation
from ..utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
MAX_GAIN_DB = 96.0


@dataclass
class ScanConfig:
    """Settings shared by the processing and statistics commands."""

    chunk_size_ms: int = 100
    adjust_gain_db: float = 0.0
    overwrite_output: bool = True
    log_level: str = 'INFO'

    def __post_init__(self):
        self.log_level = str(self.log_level).upper()
        self.validate()

    @classmethod
    def _safe_int(cls, value: str, default: int) -> int:
        """Safely parse integer value with fallback to default."""
        try:
            return int(value)
        except (ValueError, TypeError):
            logger.warning(f"Invalid integer value '{value}', using default {default}")
            return default

    @classmethod
    def _safe_float(cls, value: str, default: float) -> float:
        """Safely parse float value with fallback to default."""
        try:
            return float(value)
        except (ValueError, TypeError):
            logger.warning(f"Invalid float value '{value}', using default {default}")
            return default

    @classmethod
    def _safe_bool(cls, value: str) -> bool:
        """Safely parse boolean value."""
        if value is None:
            return False
        return str(value).lower() in ('true', '1', 'yes', 'on')

    @classmethod
    def from_env(cls) -> 'ScanConfig':
        """Create configuration from environment variables."""
        return cls(
            chunk_size_ms=cls._safe_int(os.getenv('WAVSCAN_CHUNK_SIZE_MS', '100'), 100),
            adjust_gain_db=cls._safe_float(os.getenv('WAVSCAN_ADJUST_GAIN_DB', '0.0'), 0.0),
            overwrite_output=cls._safe_bool(os.getenv('WAVSCAN_OVERWRITE_OUTPUT', 'true')),
            log_level=os.getenv('LOG_LEVEL', 'INFO'),
        )

    def validate(self) -> None:
        """Validate configuration values and raise descriptive errors."""
        errors = []

        if self.chunk_size_ms <= 0:
            errors.append(f"Chunk size must be positive, got {self.chunk_size_ms}ms")

        if not (-MAX_GAIN_DB <= self.adjust_gain_db <= MAX_GAIN_DB):
            errors.append(
                f"Adjust gain must be between {-MAX_GAIN_DB} and {MAX_GAIN_DB} dB, got {self.adjust_gain_db}"
            )

        if self.log_level not in VALID_LOG_LEVELS:
            errors.append(
                f"Invalid log_level '{self.log_level}'. "
                f"Valid options: {', '.join(VALID_LOG_LEVELS)}"
            )

        if errors:
            error_message = "Configuration validation failed:\n" + "\n".join(f"  - {error}" for error in errors)
            raise ValueError(error_message)

        logger.debug("Configuration validation passed")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)


def get_config() -> ScanConfig:
    """Get scan configuration.

    Priority order:
    1. Environment variables
    2. Default configuration
    """
    config = ScanConfig.from_env()

    logger.info("🔧 Loaded scan configuration:")
    logger.info(f"  - Chunk Size: {config.chunk_size_ms}ms")
    logger.info(f"  - Adjust Gain: {config.adjust_gain_db}dB")
    logger.info(f"  - Overwrite Output: {config.overwrite_output}")
    logger.info(f"  - Log Level: {config.log_level}")
    return config


def parse_channel_operation(text: str) -> ChannelOperation:
    """Parse ``"IN:OUT"`` or ``"IN:OUT:adjust|copy"`` into a ChannelOperation.

    Raises:
        ConfigurationError: If the text is malformed
    """
    parts = [part.strip() for part in text.split(':')]
    if len(parts) not in (2, 3):
        raise ConfigurationError(f"Invalid channel operation '{text}', expected IN:OUT[:adjust|copy]")

    try:
        input_channel, output_channel = int(parts[0]), int(parts[1])
    except ValueError as e:
        raise ConfigurationError(f"Invalid channel index in '{text}'", e) from e

    if input_channel < 0 or output_channel < 0:
        raise ConfigurationError(f"Channel indices must be non-negative in '{text}'")

    mode = parts[2].lower() if len(parts) == 3 else 'copy'
    if mode not in ('copy', 'adjust'):
        raise ConfigurationError(f"Invalid mode '{parts[2]}' in '{text}', expected 'copy' or 'adjust'")

    return ChannelOperation(input_channel, output_channel, adjust=(mode == 'adjust'))


def parse_channel_operations(texts: Iterable[str]) -> List[ChannelOperation]:
    """Parse a list of operations, rejecting duplicate output channels."""
    operations = [parse_channel_operation(text) for text in texts]

    seen = set()
    for operation in operations:
        if operation.output_channel in seen:
            raise ConfigurationError(f"Output channel {operation.output_channel} is mapped more than once")
        seen.add(operation.output_channel)

    return operations
