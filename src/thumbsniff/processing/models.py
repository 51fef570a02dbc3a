"""Data containers flowing through detection and thumbnail processing."""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import BinaryIO, Optional


@dataclass(slots=True)
class Source:
    """Input being classified and thumbnailed.

    Exactly one of ``data`` or ``stream`` is expected. The remaining fields
    start empty and are filled in by detection and by processors.

    Attributes:
        data: Whole input held in memory.
        stream: Readable, ideally seekable, binary stream.
        mime: Detected MIME type.
        extension: Canonical extension for ``mime``.
        width: Source width in pixels, when a processor determined it.
        height: Source height in pixels, when a processor determined it.
    """

    data: Optional[bytes] = None
    stream: Optional[BinaryIO] = None
    mime: str = ""
    extension: str = ""
    width: int = 0
    height: int = 0

    def open(self) -> BinaryIO:
        """Return a binary stream over the source contents."""
        if self.data is not None:
            return io.BytesIO(self.data)
        if self.stream is None:
            raise ValueError("Source has neither data nor stream.")
        return self.stream


@dataclass(slots=True)
class Thumbnail:
    """Encoded thumbnail image.

    Attributes:
        data: Encoded image bytes.
        width: Thumbnail width in pixels.
        height: Thumbnail height in pixels.
        is_png: True for PNG output, False for JPEG.
    """

    data: bytes = b""
    width: int = 0
    height: int = 0
    is_png: bool = False

    @property
    def extension(self) -> str:
        return "png" if self.is_png else "jpg"


__all__ = ["Source", "Thumbnail"]
