"""Thumbnail processors and MIME-based dispatch."""

from .errors import DecodeError, HandlerUnavailableError, ProcessingError, SourceDimensionsError
from .handlers import process_audio, process_image, process_video
from .models import Source, Thumbnail
from .registry import (
    CATEGORIES,
    Processor,
    ProcessorRegistry,
    category_for,
    default_registry,
    dispatch,
    register_processor,
)

__all__ = [
    "CATEGORIES",
    "DecodeError",
    "HandlerUnavailableError",
    "ProcessingError",
    "Processor",
    "ProcessorRegistry",
    "Source",
    "SourceDimensionsError",
    "Thumbnail",
    "category_for",
    "default_registry",
    "dispatch",
    "process_audio",
    "process_image",
    "process_video",
    "register_processor",
]
