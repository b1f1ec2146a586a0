"""Encoding resolution and byte decoding for clipboard targets.

Clipboard data arrives as raw bytes together with the name of the target it
was requested as (``UTF8_STRING``, ``text/plain;charset=utf-16``, ...). This
module works out which charset the target name implies and decodes the bytes
with it:

1. Special X11 target names (``UTF8_STRING``, ``STRING``, ``TEXT``)
2. The ``charset`` parameter of MIME-like target names
3. ``text/*`` types without a charset default to UTF-8
4. Names that are not MIME types at all default to UTF-8

Decoding never raises. A buffer that cannot be decoded yields None so the
caller can present a message instead of text.
"""

import re
import sys
from dataclasses import dataclass, field
from typing import ClassVar, Dict, Optional, Tuple

from ..shared.logging import get_logger

logger = get_logger(__name__, None, "encoding")

# Canonical charset labels
UTF_8 = "utf-8"
UTF_16 = "utf-16"
UTF_16LE = "utf-16le"
UTF_16BE = "utf-16be"
ISO_8859_1 = "iso-8859-1"
ISO_8859_15 = "iso-8859-15"
US_ASCII = "us-ascii"

SUPPORTED_CHARSETS: Tuple[str, ...] = (
    UTF_8, UTF_16LE, UTF_16BE, UTF_16, ISO_8859_1, ISO_8859_15, US_ASCII,
)

# UTF-16 byte order marks
BOM_UTF16_BE = b"\xfe\xff"
BOM_UTF16_LE = b"\xff\xfe"

REPLACEMENT_CHARACTER = "\uFFFD"

# Control characters kept for display
ALLOWED_CONTROL_CHARS = frozenset("\t\n\r")
CONTROL_CHARS_END = 0x20

CONTROL_CHARS_MESSAGE = (
    f"Control characters have been replaced with {REPLACEMENT_CHARACTER}."
)

_TOKEN = r"[A-Za-z0-9!#$%&'*+.^_`|~-]+"
_QUOTED = r'"(?:[^"\\]|\\.)*"'
_PARAMETER = re.compile(
    rf"\s*;\s*(?P<name>{_TOKEN})=(?P<value>{_TOKEN}|{_QUOTED})"
)
_MEDIA_TYPE = re.compile(rf"\s*(?P<type>{_TOKEN})/(?P<subtype>{_TOKEN})")


@dataclass(frozen=True)
class MimeType:
    """Parsed ``type/subtype; name=value`` string.

    Type, subtype and parameter names are lower-cased; parameter values keep
    their case with surrounding quotes removed.
    """
    type: str
    subtype: str
    params: Dict[str, str] = field(default_factory=dict)

    @property
    def essence(self) -> str:
        return f"{self.type}/{self.subtype}"

    def get_param(self, name: str) -> Optional[str]:
        return self.params.get(name.lower())

    @classmethod
    def parse(cls, value: str) -> Optional["MimeType"]:
        """Parse a media type string.

        Args:
            value: Text such as ``text/plain;charset=utf-8``

        Returns:
            MimeType, or None if the text is not a media type
        """
        match = _MEDIA_TYPE.match(value)
        if not match:
            return None

        params: Dict[str, str] = {}
        position = match.end()
        while position < len(value):
            param = _PARAMETER.match(value, position)
            if not param:
                if value[position:].strip():
                    return None
                break
            param_value = param.group("value")
            if param_value.startswith('"'):
                param_value = re.sub(r"\\(.)", r"\1", param_value[1:-1])
            params[param.group("name").lower()] = param_value
            position = param.end()

        return cls(
            type=match.group("type").lower(),
            subtype=match.group("subtype").lower(),
            params=params,
        )


class TargetEncodingResolver:
    """Maps clipboard target names to canonical charset labels."""

    # ICCCM: STRING is Latin-1; TEXT is owner-defined, Latin-1 is the best guess.
    SPECIAL_TARGETS: ClassVar[Dict[str, str]] = {
        "utf8_string": UTF_8,
        "string": ISO_8859_1,
        "text": ISO_8859_1,
    }

    CHARSET_ALIASES: ClassVar[Dict[str, str]] = {
        "utf-8": UTF_8,
        "utf-16le": UTF_16LE,
        "utf-16be": UTF_16BE,
        "utf-16": UTF_16,
        "unicode": UTF_16,
        "iso-8859-1": ISO_8859_1,
        "iso-8859-15": ISO_8859_15,
        "us-ascii": US_ASCII,
    }

    DEFAULT_CHARSET: ClassVar[str] = UTF_8

    def resolve(self, target: str) -> Optional[str]:
        """Resolve the charset implied by a target name.

        Args:
            target: Clipboard target name, compared case-insensitively

        Returns:
            Charset label, or None if the target carries no usable charset
        """
        name = target.strip().lower()

        special = self.SPECIAL_TARGETS.get(name)
        if special:
            return special

        content_type = MimeType.parse(name)
        if content_type is None:
            logger.debug(
                "Target is not a media type, assuming UTF-8", extra={"target": target}
            )
            return self.DEFAULT_CHARSET

        charset = content_type.get_param("charset")
        if charset is not None:
            resolved = self.CHARSET_ALIASES.get(charset.lower())
            if resolved is None:
                logger.debug(
                    "Unsupported charset parameter",
                    extra={"target": target, "charset": charset},
                )
            return resolved

        if content_type.type == "text":
            return self.DEFAULT_CHARSET
        return None


class ByteDecoder:
    """Decodes clipboard bytes with a charset label.

    UTF-8 is decoded strictly. Every other charset replaces invalid input with
    U+FFFD. The generic ``utf-16`` label sniffs a byte order mark and falls
    back to the host byte order.
    """

    # Charsets decoded with the replacement policy: label -> Python codec
    LOSSY_CODECS: ClassVar[Dict[str, str]] = {
        UTF_16LE: "utf-16-le",
        UTF_16BE: "utf-16-be",
        ISO_8859_1: "latin-1",
        ISO_8859_15: "iso8859-15",
        US_ASCII: "ascii",
        "ascii": "ascii",
    }

    def __init__(self, byteorder: str = sys.byteorder) -> None:
        """Initialize decoder.

        Args:
            byteorder: Byte order for BOM-less UTF-16 ('little' or 'big')
        """
        if byteorder not in ("little", "big"):
            raise ValueError(f"byteorder must be 'little' or 'big', got {byteorder!r}")
        self.byteorder = byteorder

    def decode(self, charset: Optional[str], data: bytes) -> Optional[str]:
        """Decode bytes with the given charset label.

        Args:
            charset: Charset label (case-insensitive), or None
            data: Raw clipboard bytes

        Returns:
            Decoded text, or None if the data cannot be decoded with the charset
        """
        if charset is None:
            return None

        label = charset.strip().lower()
        if label == UTF_8:
            try:
                return bytes(data).decode("utf-8", errors="strict")
            except UnicodeDecodeError as e:
                logger.debug("Invalid UTF-8 data", extra={"reason": str(e)})
                return None

        if label in (UTF_16, "unicode"):
            return self._decode_utf16(bytes(data))

        codec = self.LOSSY_CODECS.get(label)
        if codec is None:
            logger.debug("Unknown charset label", extra={"charset": charset})
            return None
        return bytes(data).decode(codec, errors="replace")

    def _decode_utf16(self, data: bytes) -> Optional[str]:
        byte_order = self.sniff_utf16_byte_order(data)
        if byte_order is None:
            logger.debug("No valid BOM and no default mode", extra={"size": len(data)})
            return None

        if data[:2] in (BOM_UTF16_BE, BOM_UTF16_LE):
            data = data[2:]
        codec = "utf-16-be" if byte_order == "big" else "utf-16-le"
        return data.decode(codec, errors="replace")

    def sniff_utf16_byte_order(self, data: bytes) -> Optional[str]:
        """Return 'big' or 'little' for UTF-16 data, or None if it is too short."""
        if len(data) < 2:
            return None
        if data.startswith(BOM_UTF16_BE):
            return "big"
        if data.startswith(BOM_UTF16_LE):
            return "little"
        return self.byteorder


_resolver = TargetEncodingResolver()
_decoder = ByteDecoder()


def resolve_target_encoding(target: str) -> Optional[str]:
    """Resolve the charset label implied by a clipboard target name."""
    return _resolver.resolve(target)


def decode(charset: Optional[str], data: bytes) -> Optional[str]:
    """Decode raw bytes with a charset label; None when decoding fails."""
    return _decoder.decode(charset, data)


def decode_target(target: str, data: bytes) -> Optional[str]:
    """Decode bytes straight from the target name.

    Same as resolving then decoding, except that targets which only imply
    UTF-8 by default (charset-less ``text/*`` types and names that are not
    media types) are decoded leniently with U+FFFD replacement.
    """
    name = target.strip().lower()
    if name in TargetEncodingResolver.SPECIAL_TARGETS:
        return decode(resolve_target_encoding(name), data)

    content_type = MimeType.parse(name)
    if content_type is not None and content_type.get_param("charset") is not None:
        return decode(resolve_target_encoding(name), data)
    if content_type is None or content_type.type == "text":
        return bytes(data).decode("utf-8", errors="replace")
    return None


def is_control_char(ch: str) -> bool:
    """Check for a C0 control character other than tab, LF and CR."""
    return ord(ch) < CONTROL_CHARS_END and ch not in ALLOWED_CONTROL_CHARS


def contains_control_chars(text: str) -> bool:
    return any(is_control_char(ch) for ch in text)


def replace_control_chars(text: str, replacement: str = REPLACEMENT_CHARACTER) -> str:
    """Substitute every control character (except tab, LF, CR) for display."""
    return "".join(replacement if is_control_char(ch) else ch for ch in text)
