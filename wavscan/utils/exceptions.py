"""Custom exceptions for the PCM scanning pipeline."""


class AudioProcessingError(Exception):
    """Base exception for audio processing errors."""

    def __init__(self, message: str, cause: Exception = None):
        super().__init__(message)
        self.cause = cause


class FormatError(AudioProcessingError):
    """Raised when a source or destination uses an unsupported audio format."""


class TruncatedDataError(AudioProcessingError):
    """Raised when a byte run does not hold a whole number of frames."""

    def __init__(self, message: str, byte_count: int, frame_size: int, cause: Exception = None):
        super().__init__(message, cause)
        self.byte_count = byte_count
        self.frame_size = frame_size


class ResourceError(AudioProcessingError):
    """Raised when underlying file I/O fails."""


class PreconditionViolationError(AudioProcessingError):
    """Raised when a component is used outside of its contract."""


class ConfigurationError(AudioProcessingError):
    """Raised when there's an issue with channel operations or run settings."""
