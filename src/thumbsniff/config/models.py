"""Configuration models describing thumbsniff settings."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ThumbsniffBaseModel(BaseModel):
    """Shared configuration for thumbsniff Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class ProcessingOptions(ThumbsniffBaseModel):
    """Options passed to detection and thumbnail processors.

    Attributes:
        thumb_width: Maximum thumbnail width in pixels.
        thumb_height: Maximum thumbnail height in pixels.
        max_source_width: Sources wider than this are rejected. 0 disables the check.
        max_source_height: Sources taller than this are rejected. 0 disables the check.
        jpeg_quality: Quality used when the thumbnail is encoded as JPEG.
        accepted_mime_types: Allow-list of MIME types; ``None`` accepts every
            recognized type.
    """

    thumb_width: int = Field(default=150, gt=0)
    thumb_height: int = Field(default=150, gt=0)
    max_source_width: int = Field(default=0, ge=0)
    max_source_height: int = Field(default=0, ge=0)
    jpeg_quality: int = Field(default=75, ge=1, le=100)
    accepted_mime_types: Optional[List[str]] = None

    @field_validator("accepted_mime_types")
    @classmethod
    def _normalize_mime_types(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return None
        return [item.strip().lower() for item in value if item.strip()]


class LoggingSettings(ThumbsniffBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


class CLIOptions(ThumbsniffBaseModel):
    """CLI presentation defaults.

    Attributes:
        json_default: Whether commands emit JSON unless told otherwise.
    """

    json_default: bool = False


class ThumbsniffConfig(ThumbsniffBaseModel):
    """Top-level configuration for thumbsniff.

    Attributes:
        processing: Detection and thumbnail settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    processing: ProcessingOptions = Field(default_factory=ProcessingOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "CLIOptions",
    "LoggingSettings",
    "ProcessingOptions",
    "ThumbsniffBaseModel",
    "ThumbsniffConfig",
]
