"""Processor registry and dispatch from MIME type to handler."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Mapping, Optional, Tuple

from thumbsniff.config.models import ProcessingOptions
from thumbsniff.detection.errors import RegistryFrozenError, UnsupportedMimeError

from .handlers import process_audio, process_image, process_video
from .models import Source, Thumbnail

LOGGER = logging.getLogger(__name__)

Processor = Callable[[Source, ProcessingOptions], Tuple[Source, Thumbnail]]

CATEGORIES: Mapping[str, str] = {
    "image/jpeg": "image",
    "image/png": "image",
    "image/gif": "image",
    "image/webp": "image",
    "application/pdf": "image",
    "image/bmp": "image",
    "image/photoshop": "image",
    "image/tiff": "image",
    "image/x-icon": "image",
    "audio/mpeg": "audio",
    "audio/aac": "audio",
    "audio/wave": "audio",
    "audio/x-flac": "audio",
    "audio/midi": "audio",
    "application/ogg": "video",
    "video/webm": "video",
    "video/x-matroska": "video",
    "video/mp4": "video",
    "video/avi": "video",
    "video/quicktime": "video",
    "video/x-ms-wmv": "video",
    "video/x-flv": "video",
}


def category_for(mime: str) -> Optional[str]:
    """Return ``"image"``, ``"audio"``, ``"video"`` or None for ``mime``."""
    return CATEGORIES.get(mime)


class ProcessorRegistry:
    """Map classified sources to processors.

    Per-type overrides always win over the category handler for the same type.
    Like :class:`~thumbsniff.detection.MatcherRegistry`, mutate it during setup
    and :meth:`freeze` it before concurrent use.
    """

    def __init__(
        self,
        overrides: Optional[Mapping[str, Processor]] = None,
        category_handlers: Optional[Mapping[str, Processor]] = None,
    ) -> None:
        self._overrides: Dict[str, Processor] = dict(overrides or {})
        self._categories: Dict[str, Processor] = {
            "image": process_image,
            "audio": process_audio,
            "video": process_video,
        }
        self._frozen = False
        for category, handler in (category_handlers or {}).items():
            self.set_category_handler(category, handler)

    @property
    def overrides(self) -> Mapping[str, Processor]:
        """Return a copy of the per-type override map."""
        return dict(self._overrides)

    @property
    def frozen(self) -> bool:
        """Return whether registration has been closed."""
        return self._frozen

    def register(self, mime: str, processor: Processor) -> None:
        """Install ``processor`` for ``mime``, replacing any earlier override."""
        self._ensure_mutable()
        self._overrides[mime] = processor

    def set_category_handler(self, category: str, handler: Processor) -> None:
        """Replace the handler for an ``image``, ``audio`` or ``video`` category."""
        self._ensure_mutable()
        if category not in self._categories:
            raise ValueError(f"Unknown processor category: {category!r}")
        self._categories[category] = handler

    def freeze(self) -> None:
        """End the setup phase; further registration raises."""
        self._frozen = True

    def resolve(self, mime: str) -> Processor:
        """Return the processor that would handle ``mime``.

        Raises:
            UnsupportedMimeError: If there is no override and no category for ``mime``.
        """
        override = self._overrides.get(mime)
        if override is not None:
            return override
        category = category_for(mime)
        if category is None:
            raise UnsupportedMimeError(mime)
        return self._categories[category]

    def dispatch(self, source: Source, options: ProcessingOptions) -> Tuple[Source, Thumbnail]:
        """Run the processor for ``source.mime`` and return its result unchanged."""
        processor = self.resolve(source.mime)
        LOGGER.debug("Dispatching %s to %s.", source.mime, getattr(processor, "__name__", processor))
        return processor(source, options)

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise RegistryFrozenError("processor registry is frozen")


default_registry = ProcessorRegistry()


def register_processor(mime: str, processor: Processor) -> None:
    """Register an override on the process-wide default registry.

    Not safe to call concurrently with processing.
    """
    default_registry.register(mime, processor)


def dispatch(source: Source, options: ProcessingOptions) -> Tuple[Source, Thumbnail]:
    """Dispatch ``source`` with the process-wide default registry."""
    return default_registry.dispatch(source, options)


__all__ = [
    "CATEGORIES",
    "Processor",
    "ProcessorRegistry",
    "category_for",
    "default_registry",
    "dispatch",
    "register_processor",
]
