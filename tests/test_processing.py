"""Tests covering processor dispatch and the default handlers."""

import io

import pytest
from PIL import Image

from thumbsniff.config.models import ProcessingOptions
from thumbsniff.detection import RegistryFrozenError, UnsupportedMimeError
from thumbsniff.processing import (
    CATEGORIES,
    DecodeError,
    HandlerUnavailableError,
    ProcessorRegistry,
    Source,
    SourceDimensionsError,
    Thumbnail,
    category_for,
    process_image,
)
from thumbsniff.processing import registry as registry_module


def _image_bytes(mode: str, size: tuple[int, int], fmt: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    color = (200, 30, 30, 128) if mode == "RGBA" else (200, 30, 30)
    Image.new(mode, size, color=color).save(buffer, format=fmt)
    return buffer.getvalue()


class Recorder:
    """Processor double that records calls and returns a fixed thumbnail."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.calls: list[str] = []
        self.thumbnail = Thumbnail(data=name.encode(), width=1, height=1)

    def __call__(self, source: Source, options: ProcessingOptions) -> tuple[Source, Thumbnail]:
        self.calls.append(source.mime)
        return source, self.thumbnail


def test_categories_cover_builtin_types() -> None:
    images = {mime for mime, category in CATEGORIES.items() if category == "image"}
    audio = {mime for mime, category in CATEGORIES.items() if category == "audio"}
    video = {mime for mime, category in CATEGORIES.items() if category == "video"}

    assert "application/pdf" in images
    assert audio == {"audio/mpeg", "audio/aac", "audio/wave", "audio/x-flac", "audio/midi"}
    assert "application/ogg" in video
    assert len(CATEGORIES) == 22
    assert category_for("text/plain") is None


def test_override_takes_precedence_over_category() -> None:
    override = Recorder("override")
    image_handler = Recorder("image")
    registry = ProcessorRegistry(category_handlers={"image": image_handler})
    registry.register("image/png", override)
    source = Source(data=b"", mime="image/png")

    result = registry.dispatch(source, ProcessingOptions())

    assert result == (source, override.thumbnail)
    assert override.calls == ["image/png"]
    assert image_handler.calls == []


def test_override_failures_propagate_unchanged() -> None:
    def failing(source: Source, options: ProcessingOptions) -> tuple[Source, Thumbnail]:
        raise KeyError("override owns failure")

    registry = ProcessorRegistry({"image/gif": failing})

    with pytest.raises(KeyError):
        registry.dispatch(Source(mime="image/gif"), ProcessingOptions())


def test_category_handler_selected_by_label() -> None:
    audio_handler = Recorder("audio")
    video_handler = Recorder("video")
    registry = ProcessorRegistry(category_handlers={"audio": audio_handler, "video": video_handler})

    registry.dispatch(Source(mime="audio/x-flac"), ProcessingOptions())
    registry.dispatch(Source(mime="application/ogg"), ProcessingOptions())

    assert audio_handler.calls == ["audio/x-flac"]
    assert video_handler.calls == ["application/ogg"]


def test_unknown_label_without_override_is_unsupported() -> None:
    registry = ProcessorRegistry()

    with pytest.raises(UnsupportedMimeError) as excinfo:
        registry.dispatch(Source(mime="text/plain"), ProcessingOptions())

    assert excinfo.value.mime == "text/plain"


def test_override_adds_support_for_new_label() -> None:
    handler = Recorder("text")
    registry = ProcessorRegistry()
    registry.register("text/plain", handler)

    _, thumb = registry.dispatch(Source(mime="text/plain"), ProcessingOptions())

    assert thumb.data == b"text"


def test_register_overwrites_previous_override() -> None:
    first, second = Recorder("first"), Recorder("second")
    registry = ProcessorRegistry()
    registry.register("video/mp4", first)
    registry.register("video/mp4", second)

    registry.dispatch(Source(mime="video/mp4"), ProcessingOptions())

    assert first.calls == []
    assert second.calls == ["video/mp4"]


def test_unknown_category_rejected() -> None:
    with pytest.raises(ValueError):
        ProcessorRegistry(category_handlers={"document": Recorder("doc")})


def test_frozen_registry_rejects_mutation() -> None:
    handler = Recorder("gif")
    registry = ProcessorRegistry(overrides={"image/gif": handler})
    assert not registry.frozen
    registry.freeze()

    assert registry.frozen
    with pytest.raises(RegistryFrozenError):
        registry.register("image/png", Recorder("png"))
    with pytest.raises(RegistryFrozenError):
        registry.set_category_handler("audio", Recorder("audio"))
    assert registry.overrides == {"image/gif": handler}


def test_module_level_register_and_dispatch(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(registry_module, "default_registry", ProcessorRegistry())
    handler = Recorder("module")

    registry_module.register_processor("audio/midi", handler)
    registry_module.dispatch(Source(mime="audio/midi"), ProcessingOptions())

    assert handler.calls == ["audio/midi"]


def test_default_audio_and_video_handlers_are_unavailable() -> None:
    registry = ProcessorRegistry()

    with pytest.raises(HandlerUnavailableError, match="audio"):
        registry.dispatch(Source(mime="audio/mpeg"), ProcessingOptions())
    with pytest.raises(HandlerUnavailableError, match="video"):
        registry.dispatch(Source(mime="video/webm"), ProcessingOptions())


def test_process_image_downscales_to_jpeg() -> None:
    source = Source(data=_image_bytes("RGB", (400, 200)), mime="image/png")
    options = ProcessingOptions(thumb_width=100, thumb_height=100, jpeg_quality=90)

    result_source, thumb = process_image(source, options)

    assert (result_source.width, result_source.height) == (400, 200)
    assert (thumb.width, thumb.height) == (100, 50)
    assert thumb.is_png is False
    assert thumb.extension == "jpg"
    assert thumb.data.startswith(b"\xff\xd8\xff")


def test_process_image_keeps_transparency_as_png() -> None:
    source = Source(data=_image_bytes("RGBA", (60, 120)), mime="image/png")

    _, thumb = process_image(source, ProcessingOptions(thumb_width=30, thumb_height=30))

    assert thumb.is_png is True
    assert thumb.data.startswith(b"\x89PNG\r\n\x1a\n")
    assert (thumb.width, thumb.height) == (15, 30)


def test_process_image_never_upscales() -> None:
    source = Source(data=_image_bytes("RGB", (20, 10), fmt="GIF"), mime="image/gif")

    _, thumb = process_image(source, ProcessingOptions(thumb_width=150, thumb_height=150))

    assert (thumb.width, thumb.height) == (20, 10)


def test_process_image_reads_from_stream() -> None:
    stream = io.BytesIO(_image_bytes("RGB", (50, 50), fmt="BMP"))

    source, thumb = process_image(Source(stream=stream, mime="image/bmp"), ProcessingOptions())

    assert source.width == 50
    assert thumb.width == 50


def test_process_image_enforces_source_limits() -> None:
    source = Source(data=_image_bytes("RGB", (400, 200)), mime="image/png")

    with pytest.raises(SourceDimensionsError):
        process_image(source, ProcessingOptions(max_source_width=300))
    with pytest.raises(SourceDimensionsError):
        process_image(source, ProcessingOptions(max_source_height=100))


def test_process_image_wraps_decompression_bomb(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    source = Source(data=_image_bytes("RGB", (100, 100)), mime="image/png")

    with pytest.raises(SourceDimensionsError) as excinfo:
        process_image(source, ProcessingOptions())

    assert isinstance(excinfo.value.__cause__, Image.DecompressionBombError)


def test_process_image_rejects_undecodable_data() -> None:
    with pytest.raises(DecodeError):
        process_image(Source(data=b"%PDF-1.4\n%broken", mime="application/pdf"), ProcessingOptions())


def test_source_without_payload_cannot_open() -> None:
    with pytest.raises(ValueError):
        Source(mime="image/png").open()
