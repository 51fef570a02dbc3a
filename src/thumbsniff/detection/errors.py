"""Detection and registry errors."""

OCTET_STREAM = "application/octet-stream"


class UnsupportedMimeError(ValueError):
    """Raised when a MIME type is unrecognized, not accepted, or has no handler.

    Attributes:
        mime: Offending MIME type. ``application/octet-stream`` when nothing matched.
    """

    def __init__(self, mime: str) -> None:
        super().__init__(f"unsupported MIME type: {mime}")
        self.mime = mime


class RegistryFrozenError(RuntimeError):
    """Raised when registering into a registry after ``freeze()``."""
