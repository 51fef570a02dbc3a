"""Top-level package for thumbsniff."""

from importlib import metadata as _metadata

from thumbsniff.detection import (
    Detection,
    ExactSignature,
    MaskedSignature,
    Matcher,
    MatcherRegistry,
    Mp4Signature,
    UnsupportedMimeError,
    WebmOrMkvSignature,
    detect,
    register_matcher,
)
from thumbsniff.pipeline import ThumbnailPipeline, process
from thumbsniff.processing import (
    ProcessorRegistry,
    Source,
    Thumbnail,
    dispatch,
    register_processor,
)

__all__ = [
    "Detection",
    "ExactSignature",
    "MaskedSignature",
    "Matcher",
    "MatcherRegistry",
    "Mp4Signature",
    "ProcessorRegistry",
    "Source",
    "Thumbnail",
    "ThumbnailPipeline",
    "UnsupportedMimeError",
    "WebmOrMkvSignature",
    "__version__",
    "detect",
    "dispatch",
    "process",
    "register_matcher",
    "register_processor",
]


def __getattr__(name: str):
    if name == "__version__":
        return _metadata.version("thumbsniff")
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    return sorted(list(globals().keys()) + ["__version__"])
