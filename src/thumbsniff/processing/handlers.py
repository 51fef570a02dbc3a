"""Default category handlers.

Images are thumbnailed with Pillow. Audio and video need external decoders,
so their default handlers only report that none is installed.
"""

from __future__ import annotations

import io
import logging
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from thumbsniff.config.models import ProcessingOptions

from .errors import DecodeError, HandlerUnavailableError, SourceDimensionsError
from .models import Source, Thumbnail

LOGGER = logging.getLogger(__name__)


def process_image(source: Source, options: ProcessingOptions) -> Tuple[Source, Thumbnail]:
    """Downscale an image source to fit the configured thumbnail box.

    Images with transparency are encoded as PNG, everything else as JPEG.

    Args:
        source: Classified source holding image data.
        options: Thumbnail and limit settings.

    Returns:
        Tuple[Source, Thumbnail]: Source with dimensions recorded, and the thumbnail.

    Raises:
        DecodeError: If Pillow cannot read the source.
        SourceDimensionsError: If the source exceeds the configured maximum
            or Pillow's decompression bomb limit.
    """
    try:
        image = Image.open(source.open())
    except Image.DecompressionBombError as exc:
        raise SourceDimensionsError(str(exc)) from exc
    except (UnidentifiedImageError, OSError) as exc:
        raise DecodeError(f"cannot decode {source.mime or 'source'}: {exc}") from exc

    with image:
        source.width, source.height = image.size
        _check_dimensions(source, options)

        try:
            image.load()
        except Image.DecompressionBombError as exc:
            raise SourceDimensionsError(str(exc)) from exc
        except OSError as exc:
            raise DecodeError(f"cannot decode {source.mime or 'source'}: {exc}") from exc

        has_alpha = image.mode in ("RGBA", "LA", "PA") or (
            image.mode == "P" and "transparency" in image.info
        )
        frame = image.convert("RGBA" if has_alpha else "RGB")
        frame.thumbnail((options.thumb_width, options.thumb_height))

        buffer = io.BytesIO()
        if has_alpha:
            frame.save(buffer, format="PNG", optimize=True)
        else:
            frame.save(buffer, format="JPEG", quality=options.jpeg_quality)

    LOGGER.debug(
        "Thumbnailed %s %dx%d -> %dx%d.",
        source.mime,
        source.width,
        source.height,
        frame.width,
        frame.height,
    )
    thumb = Thumbnail(data=buffer.getvalue(), width=frame.width, height=frame.height, is_png=has_alpha)
    return source, thumb


def process_audio(source: Source, options: ProcessingOptions) -> Tuple[Source, Thumbnail]:
    """Placeholder until an audio decoder is registered."""
    raise HandlerUnavailableError(f"no audio decoder registered for {source.mime}")


def process_video(source: Source, options: ProcessingOptions) -> Tuple[Source, Thumbnail]:
    """Placeholder until a video decoder is registered."""
    raise HandlerUnavailableError(f"no video decoder registered for {source.mime}")


def _check_dimensions(source: Source, options: ProcessingOptions) -> None:
    too_wide = options.max_source_width and source.width > options.max_source_width
    too_tall = options.max_source_height and source.height > options.max_source_height
    if too_wide or too_tall:
        raise SourceDimensionsError(
            f"source is {source.width}x{source.height}, limit is "
            f"{options.max_source_width or '-'}x{options.max_source_height or '-'}"
        )


__all__ = ["process_audio", "process_image", "process_video"]
