"""Detection engine: prefix acquisition and ordered matcher evaluation."""

from __future__ import annotations

import logging
from typing import BinaryIO, Collection, Iterable, List, NamedTuple, Optional, Sequence, Union

from .errors import OCTET_STREAM, RegistryFrozenError, UnsupportedMimeError
from .matchers import BUILTIN_MATCHERS, Matcher

LOGGER = logging.getLogger(__name__)

SNIFF_SIZE = 512

BytesLike = Union[bytes, bytearray, memoryview]
Sniffable = Union[BytesLike, BinaryIO]


class Detection(NamedTuple):
    """Successful classification of a byte prefix."""

    mime: str
    extension: str


def read_prefix(source: Sniffable) -> bytes:
    """Return at most ``SNIFF_SIZE`` leading bytes of ``source``.

    Buffers are truncated. Streams get exactly one ``read`` call, so a short
    read from a slow or chunked stream yields a short prefix.

    Args:
        source: In-memory buffer or a binary stream with ``read()``.

    Returns:
        bytes: The prefix used for matching.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source[:SNIFF_SIZE])
    return bytes(source.read(SNIFF_SIZE) or b"")


class MatcherRegistry:
    """Ordered collection of matchers where the first match wins.

    Registration is a setup step. Call :meth:`freeze` before sharing the
    registry between threads; reads need no locking afterwards.
    """

    def __init__(self, matchers: Iterable[Matcher] = ()) -> None:
        self._matchers: List[Matcher] = list(matchers)
        self._frozen = False

    @classmethod
    def with_defaults(cls) -> "MatcherRegistry":
        """Return a registry pre-populated with the built-in matchers."""
        return cls(BUILTIN_MATCHERS)

    @property
    def matchers(self) -> Sequence[Matcher]:
        """Return the matchers in evaluation order."""
        return tuple(self._matchers)

    @property
    def frozen(self) -> bool:
        """Return whether registration has been closed."""
        return self._frozen

    def register(self, matcher: Matcher) -> None:
        """Append a matcher, giving it the lowest precedence.

        Raises:
            RegistryFrozenError: If the registry was frozen.
        """
        if self._frozen:
            raise RegistryFrozenError("matcher registry is frozen")
        self._matchers.append(matcher)

    def freeze(self) -> None:
        """End the setup phase; further registration raises."""
        self._frozen = True

    def match(self, prefix: bytes) -> Optional[Detection]:
        """Return the first matcher's result for ``prefix``, or None."""
        for matcher in self._matchers:
            mime, extension = matcher.match(prefix)
            if mime:
                return Detection(mime, extension)
        return None

    def detect(
        self,
        source: Sniffable,
        accepted: Optional[Collection[str]] = None,
    ) -> Detection:
        """Classify ``source`` from its leading bytes.

        Args:
            source: In-memory buffer or a binary stream with ``read()``.
            accepted: Optional allow-list of MIME types; ``None`` accepts all.

        Returns:
            Detection: MIME type and canonical extension.

        Raises:
            UnsupportedMimeError: If nothing matched (``application/octet-stream``)
                or the matched type is not in ``accepted`` (the matched type).
        """
        prefix = read_prefix(source)
        detection = self.match(prefix)
        if detection is None:
            LOGGER.debug("No matcher recognized %d-byte prefix.", len(prefix))
            raise UnsupportedMimeError(OCTET_STREAM)
        if accepted is not None and detection.mime not in accepted:
            LOGGER.debug("Detected %s but it is not accepted.", detection.mime)
            raise UnsupportedMimeError(detection.mime)
        LOGGER.debug("Detected %s (%s).", detection.mime, detection.extension)
        return detection


default_registry = MatcherRegistry.with_defaults()


def register_matcher(matcher: Matcher) -> None:
    """Append a matcher to the process-wide default registry.

    Not safe to call concurrently with detection.
    """
    default_registry.register(matcher)


def detect(source: Sniffable, accepted: Optional[Collection[str]] = None) -> Detection:
    """Classify ``source`` with the process-wide default registry."""
    return default_registry.detect(source, accepted)


__all__ = [
    "Detection",
    "MatcherRegistry",
    "SNIFF_SIZE",
    "Sniffable",
    "default_registry",
    "detect",
    "read_prefix",
    "register_matcher",
]
