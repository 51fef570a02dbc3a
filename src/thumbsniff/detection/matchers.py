"""Magic-number matchers that map a byte prefix to a MIME type and extension.

Every matcher exposes a single ``match(prefix)`` method returning
``(mime, extension)``, or ``("", "")`` when the prefix is not recognized.
Matchers hold no state, so one instance can serve any number of detections.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Tuple

NO_MATCH: Tuple[str, str] = ("", "")

_EBML_HEADER = b"\x1a\x45\xdf\xa3"


class Matcher(Protocol):
    """Capability shared by all matchers."""

    def match(self, prefix: bytes) -> Tuple[str, str]:
        """Return ``(mime, extension)`` or ``("", "")`` on no match."""
        ...


@dataclass(frozen=True, slots=True)
class ExactSignature:
    """Match when the prefix starts with a fixed byte sequence."""

    extension: str
    mime: str
    signature: bytes

    def match(self, prefix: bytes) -> Tuple[str, str]:
        if prefix.startswith(self.signature):
            return self.mime, self.extension
        return NO_MATCH


@dataclass(frozen=True, slots=True)
class MaskedSignature:
    """Match ``prefix[i] & mask[i] == pattern[i]`` for every mask position.

    Zero mask bytes mark variable fields (such as the RIFF chunk size) that are
    ignored. Prefixes shorter than the mask never match.
    """

    extension: str
    mime: str
    mask: bytes
    pattern: bytes

    def __post_init__(self) -> None:
        if len(self.mask) != len(self.pattern):
            raise ValueError(
                f"{self.mime}: mask and pattern lengths differ "
                f"({len(self.mask)} != {len(self.pattern)})"
            )

    def match(self, prefix: bytes) -> Tuple[str, str]:
        if len(prefix) < len(self.mask):
            return NO_MATCH
        for data_byte, mask_byte, pattern_byte in zip(prefix, self.mask, self.pattern):
            if data_byte & mask_byte != pattern_byte:
                return NO_MATCH
        return self.mime, self.extension


@dataclass(frozen=True, slots=True)
class WebmOrMkvSignature:
    """Distinguish WebM from Matroska by the doctype inside the EBML header."""

    def match(self, prefix: bytes) -> Tuple[str, str]:
        if len(prefix) < 8 or not prefix.startswith(_EBML_HEADER):
            return NO_MATCH
        body = prefix[4:]
        if b"webm" in body:
            return "video/webm", "webm"
        if b"matroska" in body:
            return "video/x-matroska", "mkv"
        return NO_MATCH


@dataclass(frozen=True, slots=True)
class Mp4Signature:
    """Look for an ``mp4*`` brand in the leading ``ftyp`` box.

    The box is laid out as size, ``ftyp``, major brand, minor version and a
    list of compatible brands, all 4 bytes wide.
    """

    def match(self, prefix: bytes) -> Tuple[str, str]:
        if len(prefix) < 12:
            return NO_MATCH

        box_size = int.from_bytes(prefix[:4], "big")
        if box_size % 4 != 0 or box_size > len(prefix) or prefix[4:8] != b"ftyp":
            return NO_MATCH

        for offset in range(8, box_size, 4):
            if offset == 12:
                # minor version, not a brand
                continue
            if prefix[offset : offset + 3] == b"mp4":
                return "video/mp4", "mp4"
        return NO_MATCH


_RIFF_MASK = b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff"

# Most common types first, more expensive checks lower down.
BUILTIN_MATCHERS: Tuple[Matcher, ...] = (
    ExactSignature("jpg", "image/jpeg", b"\xff\xd8\xff"),
    ExactSignature("png", "image/png", b"\x89PNG\r\n\x1a\n"),
    ExactSignature("gif", "image/gif", b"GIF87a"),
    ExactSignature("gif", "image/gif", b"GIF89a"),
    MaskedSignature("webp", "image/webp", _RIFF_MASK + b"\xff\xff", b"RIFF\x00\x00\x00\x00WEBPVP"),
    MaskedSignature("ogg", "application/ogg", b"\xff\xff\xff\xff\xff", b"OggS\x00"),
    WebmOrMkvSignature(),
    ExactSignature("pdf", "application/pdf", b"%PDF-"),
    MaskedSignature("mp3", "audio/mpeg", b"\xff\xff\xff", b"ID3"),
    Mp4Signature(),
    # ADTS syncword, MPEG-4 and MPEG-2 variants
    ExactSignature("aac", "audio/aac", b"\xff\xf1"),
    ExactSignature("aac", "audio/aac", b"\xff\xf9"),
    ExactSignature("bmp", "image/bmp", b"BM"),
    MaskedSignature("wav", "audio/wave", _RIFF_MASK, b"RIFF\x00\x00\x00\x00WAVE"),
    MaskedSignature("avi", "video/avi", _RIFF_MASK, b"RIFF\x00\x00\x00\x00AVI "),
    ExactSignature("psd", "image/photoshop", b"8BPS"),
    ExactSignature("flac", "audio/x-flac", b"fLaC"),
    ExactSignature("tiff", "image/tiff", b"II*\x00"),
    ExactSignature("tiff", "image/tiff", b"MM\x00*"),
    ExactSignature("mov", "video/quicktime", b"\x00\x00\x00\x14ftyp"),
    ExactSignature("wmv", "video/x-ms-wmv", b"\x30\x26\xb2\x75\x8e\x66\xcf\x11\xa6\xd9"),
    ExactSignature("flv", "video/x-flv", b"FLV\x01"),
    ExactSignature("ico", "image/x-icon", b"\x00\x00\x01\x00"),
    MaskedSignature("midi", "audio/midi", b"\xff" * 8, b"MThd\x00\x00\x00\x06"),
)


__all__ = [
    "BUILTIN_MATCHERS",
    "ExactSignature",
    "MaskedSignature",
    "Matcher",
    "Mp4Signature",
    "NO_MATCH",
    "WebmOrMkvSignature",
]
