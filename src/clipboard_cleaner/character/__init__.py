"""Character layer: character filters and clipboard byte decoding."""

from .char_filter import CharFilter, RangeComponent, SingleCharacter
from .encoding import (
    ByteDecoder,
    MimeType,
    TargetEncodingResolver,
    contains_control_chars,
    decode,
    decode_target,
    replace_control_chars,
    resolve_target_encoding,
)

__all__ = [
    # Modules
    "char_filter",
    "encoding",
    # Filters
    "CharFilter",
    "RangeComponent",
    "SingleCharacter",
    # Encoding
    "ByteDecoder",
    "MimeType",
    "TargetEncodingResolver",
    "contains_control_chars",
    "decode",
    "decode_target",
    "replace_control_chars",
    "resolve_target_encoding",
]
