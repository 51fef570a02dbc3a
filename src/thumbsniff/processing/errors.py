"""Thumbnail processing errors."""


class ProcessingError(Exception):
    """Base exception for failures inside a processor."""


class DecodeError(ProcessingError):
    """Raised when a source cannot be decoded."""


class SourceDimensionsError(ProcessingError):
    """Raised when a source exceeds the configured maximum dimensions."""


class HandlerUnavailableError(ProcessingError):
    """Raised when no decoder is installed for a media category."""
