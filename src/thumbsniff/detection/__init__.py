"""Content-type sniffing from a bounded byte prefix."""

from .engine import (
    SNIFF_SIZE,
    Detection,
    MatcherRegistry,
    default_registry,
    detect,
    read_prefix,
    register_matcher,
)
from .errors import OCTET_STREAM, RegistryFrozenError, UnsupportedMimeError
from .matchers import (
    BUILTIN_MATCHERS,
    ExactSignature,
    MaskedSignature,
    Matcher,
    Mp4Signature,
    WebmOrMkvSignature,
)

__all__ = [
    "BUILTIN_MATCHERS",
    "Detection",
    "ExactSignature",
    "MaskedSignature",
    "Matcher",
    "MatcherRegistry",
    "Mp4Signature",
    "OCTET_STREAM",
    "RegistryFrozenError",
    "SNIFF_SIZE",
    "UnsupportedMimeError",
    "WebmOrMkvSignature",
    "default_registry",
    "detect",
    "read_prefix",
    "register_matcher",
]
