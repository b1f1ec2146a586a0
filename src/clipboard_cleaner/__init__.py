"""Clipboard Cleaner.

Decodes clipboard data and sanitizes the text with configurable profiles of
character filters and replacement templates.

Engine API:
- load(config) -> ProfileSet, then ProfileSet.select(name)
- apply(transformation, text)
- resolve_target_encoding(target_name)
- decode(charset_label, data)
"""

__version__ = "0.1.0"
__author__ = "Clipboard Cleaner Team"

from typing import Mapping, Union

from .api import ClipboardSanitizer, ProfileSet, apply
from .character.encoding import decode, decode_target, resolve_target_encoding
from .shared.config import Config, TransformationProfile
from .shared.errors import (
    CleanerError,
    ConfigError,
    PatternSyntaxError,
    UnknownFilterReference,
)
from .shared.result import SanitizeResult
from .transformation.engine import TextTransformation


def load(config: Union[Config, Mapping]) -> ProfileSet:
    """Compile a configuration into a ready-to-use profile set."""
    return ProfileSet.load(config)


__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Engine API
    "load",
    "apply",
    "resolve_target_encoding",
    "decode",
    "decode_target",

    # Pipeline and compiled objects
    "ClipboardSanitizer",
    "ProfileSet",
    "SanitizeResult",
    "TextTransformation",

    # Configuration
    "Config",
    "TransformationProfile",

    # Errors
    "CleanerError",
    "ConfigError",
    "PatternSyntaxError",
    "UnknownFilterReference",
]
