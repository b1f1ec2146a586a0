"""Replacement patterns and the replacement template mini-language.

A replacement template is literal text with ``{tag}`` placeholders, for
example ``"<{uni-codepoint}>"``. Parsing turns the template into an ordered
tuple of :class:`ReplacementPattern` values; rendering a template for one
character concatenates the output of every pattern.

Supported tags:

=================  =======================  ======================
Tag                Kind                     Output for ``'A'``
=================  =======================  ======================
``ident``/``char`` IDENTITY                 ``A``
``hex-esc``        ESCAPED_HEX_BYTES        ``\\x00\\x00\\x00\\x41``
``uni-simple``     SIMPLE_UNICODE_CODEPOINT ``0041``
``uni-esc``        ESCAPED_UNICODE          ``\\u0041``
``uni-codepoint``  UPLUS_UNICODE            ``U+41``
``rust``           DEBUG_ESCAPED_UNICODE    ``\\u{41}``
``entity``         ENTITY                   ``&#65;``
=================  =======================  ======================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Tuple

from ..shared.errors import PatternSyntaxError
from ..shared.logging import get_logger

logger = get_logger(__name__, None, "patterns")

BMP_MAX = 0xFFFF

TAG_OPEN = "{"
TAG_CLOSE = "}"


class PatternKind(Enum):
    """Kinds of replacement fragment."""
    LITERAL = "literal"
    ESCAPED_HEX_BYTES = "hex-esc"
    SIMPLE_UNICODE_CODEPOINT = "uni-simple"
    ESCAPED_UNICODE = "uni-esc"
    UPLUS_UNICODE = "uni-codepoint"
    DEBUG_ESCAPED_UNICODE = "rust"
    ENTITY = "entity"
    IDENTITY = "ident"


TAGS: Dict[str, PatternKind] = {
    "ident": PatternKind.IDENTITY,
    "char": PatternKind.IDENTITY,
    "hex-esc": PatternKind.ESCAPED_HEX_BYTES,
    "uni-simple": PatternKind.SIMPLE_UNICODE_CODEPOINT,
    "uni-esc": PatternKind.ESCAPED_UNICODE,
    "uni-codepoint": PatternKind.UPLUS_UNICODE,
    "rust": PatternKind.DEBUG_ESCAPED_UNICODE,
    "entity": PatternKind.ENTITY,
}


def _escaped_hex_bytes(ch: str) -> str:
    return "".join(f"\\x{byte:02x}" for byte in ord(ch).to_bytes(4, "big"))


def _simple_codepoint(ch: str) -> str:
    codepoint = ord(ch)
    if codepoint > BMP_MAX:
        return f"{codepoint:08x}"
    return f"{codepoint:04x}"


def _escaped_unicode(ch: str) -> str:
    codepoint = ord(ch)
    if codepoint > BMP_MAX:
        return f"\\U{codepoint:08x}"
    return f"\\u{codepoint:04x}"


def _uplus(ch: str) -> str:
    return f"U+{ord(ch):x}"


def _debug_escaped(ch: str) -> str:
    return f"\\u{{{ord(ch):x}}}"


def _entity(ch: str) -> str:
    return f"&#{ord(ch)};"


def _identity(ch: str) -> str:
    return ch


_RENDERERS: Dict[PatternKind, Callable[[str], str]] = {
    PatternKind.ESCAPED_HEX_BYTES: _escaped_hex_bytes,
    PatternKind.SIMPLE_UNICODE_CODEPOINT: _simple_codepoint,
    PatternKind.ESCAPED_UNICODE: _escaped_unicode,
    PatternKind.UPLUS_UNICODE: _uplus,
    PatternKind.DEBUG_ESCAPED_UNICODE: _debug_escaped,
    PatternKind.ENTITY: _entity,
    PatternKind.IDENTITY: _identity,
}


@dataclass(frozen=True)
class ReplacementPattern:
    """One fragment of a replacement template.

    Attributes:
        kind: What the fragment renders
        text: Literal text, only used by LITERAL fragments
    """
    kind: PatternKind
    text: str = ""

    @classmethod
    def literal(cls, text: str) -> "ReplacementPattern":
        return cls(PatternKind.LITERAL, text)

    def render(self, ch: str) -> str:
        """Render this fragment for one matched character."""
        if self.kind is PatternKind.LITERAL:
            return self.text
        return _RENDERERS[self.kind](ch)


@dataclass(frozen=True)
class ReplacementTemplate:
    """Compiled replacement template."""

    source: str
    patterns: Tuple[ReplacementPattern, ...]

    @classmethod
    def parse(cls, template: str) -> "ReplacementTemplate":
        """Compile a template string.

        Args:
            template: Template text with ``{tag}`` placeholders

        Returns:
            Compiled template

        Raises:
            PatternSyntaxError: if a placeholder names an unknown tag
        """
        patterns: List[ReplacementPattern] = []
        token: List[str] = []
        in_tag = False
        tag_start = 0

        for position, ch in enumerate(template):
            if not in_tag and ch == TAG_OPEN:
                if token:
                    patterns.append(ReplacementPattern.literal("".join(token)))
                token = []
                in_tag = True
                tag_start = position
            elif in_tag and ch == TAG_CLOSE:
                tag = "".join(token)
                kind = TAGS.get(tag)
                if kind is None:
                    raise PatternSyntaxError(template, tag, tag_start)
                patterns.append(ReplacementPattern(kind))
                token = []
                in_tag = False
            else:
                token.append(ch)

        if in_tag:
            # No closing brace: the tag body becomes literal text, the brace is dropped.
            logger.warning(
                "Unterminated tag in replacement template",
                extra={"template": template, "position": tag_start},
            )
        if token:
            patterns.append(ReplacementPattern.literal("".join(token)))

        compiled = cls(template, tuple(patterns))
        logger.debug(
            "Compiled replacement template",
            extra={"template": template, "fragments": len(compiled.patterns)},
        )
        return compiled

    def render(self, ch: str) -> str:
        """Render every fragment for one character and concatenate them."""
        return "".join(pattern.render(ch) for pattern in self.patterns)
