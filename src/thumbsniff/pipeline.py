"""High-level detect-then-dispatch orchestration."""

from __future__ import annotations

import io
import logging
from typing import Optional, Tuple

from thumbsniff.config.models import ProcessingOptions
from thumbsniff.detection import Detection, MatcherRegistry
from thumbsniff.detection import default_registry as default_matchers
from thumbsniff.detection.engine import Sniffable
from thumbsniff.processing import ProcessorRegistry, Source, Thumbnail
from thumbsniff.processing import default_registry as default_processors

LOGGER = logging.getLogger(__name__)


class ThumbnailPipeline:
    """Coordinate detection and dispatch to turn raw input into a thumbnail."""

    def __init__(
        self,
        matchers: Optional[MatcherRegistry] = None,
        processors: Optional[ProcessorRegistry] = None,
        options: Optional[ProcessingOptions] = None,
    ) -> None:
        self.matchers = matchers if matchers is not None else default_matchers
        self.processors = processors if processors is not None else default_processors
        self.options = options or ProcessingOptions()

    def detect(self, source: Sniffable) -> Detection:
        """Classify ``source`` honoring ``options.accepted_mime_types``."""
        return self.matchers.detect(source, self.options.accepted_mime_types)

    def process(self, source: Sniffable) -> Tuple[Source, Thumbnail]:
        """Detect the type of ``source`` and produce its thumbnail.

        Seekable streams are rewound to the start before the processor runs.

        Raises:
            UnsupportedMimeError: If the type is unknown, not accepted or unhandled.
            ProcessingError: If the selected processor fails.
        """
        if isinstance(source, (bytes, bytearray, memoryview)):
            subject = Source(data=bytes(source))
            detection = self.detect(subject.data)
        else:
            subject = Source(stream=source)
            detection = self.detect(source)
            _rewind(source)

        subject.mime, subject.extension = detection
        LOGGER.info("Processing %s source.", subject.mime)
        return self.processors.dispatch(subject, self.options)


def process(
    source: Sniffable, options: Optional[ProcessingOptions] = None
) -> Tuple[Source, Thumbnail]:
    """Thumbnail ``source`` with the default matcher and processor registries."""
    return ThumbnailPipeline(options=options).process(source)


def _rewind(stream) -> None:
    seekable = getattr(stream, "seekable", None)
    if seekable is not None and not seekable():
        return
    try:
        stream.seek(0, io.SEEK_SET)
    except (AttributeError, io.UnsupportedOperation):
        LOGGER.debug("Stream is not seekable; processor reads from the current position.")


__all__ = ["ThumbnailPipeline", "process"]
