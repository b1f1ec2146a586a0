"""Compiled profile sets and the clipboard sanitizing pipeline.

:class:`ProfileSet` is what :func:`clipboard_cleaner.load` returns: every
profile of a configuration compiled once, ready to be selected by name.
:class:`ClipboardSanitizer` chains the whole pipeline for one clipboard
buffer: resolve the charset, decode, run the control-character display pass
and apply the selected profile.
"""

from typing import Dict, List, Mapping, Optional, Tuple, Union

from ..character.encoding import (
    CONTROL_CHARS_MESSAGE,
    UTF_8,
    ByteDecoder,
    TargetEncodingResolver,
    contains_control_chars,
    replace_control_chars,
)
from ..shared.config import Config, TransformationProfile
from ..shared.logging import get_logger, new_correlation_id
from ..shared.result import DiagnosticSeverity, SanitizeResult
from ..transformation.engine import TextTransformation

logger = get_logger(__name__, None, "sanitizer")


class ProfileSet:
    """All profiles of one configuration, compiled and keyed by name."""

    def __init__(
        self,
        transformations: Mapping[str, TextTransformation],
        profiles: Tuple[TransformationProfile, ...] = (),
        default_profile_name: Optional[str] = None,
        gui_replacement_profile_name: Optional[str] = None,
    ) -> None:
        self._transformations: Dict[str, TextTransformation] = dict(transformations)
        self.profiles = profiles
        self.default_profile_name = default_profile_name
        self.gui_replacement_profile_name = gui_replacement_profile_name

    @classmethod
    def load(cls, config: Union[Config, Mapping]) -> "ProfileSet":
        """Compile every profile of a configuration.

        Args:
            config: Config instance or a parsed configuration document

        Raises:
            ConfigError: if a filter entry is malformed
            UnknownFilterReference: if a profile references an undeclared filter
            PatternSyntaxError: if a replacement template is invalid
        """
        if not isinstance(config, Config):
            config = Config.from_dict(config)

        transformations: Dict[str, TextTransformation] = {}
        profiles: List[TransformationProfile] = []
        for profile in config.profiles:
            if profile.name in transformations:
                logger.warning(
                    "Duplicate profile name, keeping the first definition",
                    extra={"profile": profile.name},
                )
                continue
            transformations[profile.name] = TextTransformation.from_config(config, profile)
            profiles.append(profile)

        for reference in (config.default_profile_name, config.gui_replacement_profile_name):
            if reference is not None and reference not in transformations:
                logger.warning(
                    "Configuration names a profile that does not exist",
                    extra={"profile": reference},
                )

        logger.info("Loaded transformation profiles", extra={"count": len(profiles)})
        return cls(
            transformations,
            tuple(profiles),
            config.default_profile_name,
            config.gui_replacement_profile_name,
        )

    def names(self) -> List[str]:
        return list(self._transformations)

    def select(self, name: Optional[str]) -> Optional[TextTransformation]:
        """Return the compiled profile with the given name, or None."""
        if name is None:
            return None
        return self._transformations.get(name)

    def default(self) -> Optional[TextTransformation]:
        return self.select(self.default_profile_name)

    def gui_replacement(self) -> Optional[TextTransformation]:
        return self.select(self.gui_replacement_profile_name)

    def __contains__(self, name: object) -> bool:
        return name in self._transformations

    def __len__(self) -> int:
        return len(self._transformations)


def apply(transformation: TextTransformation, text: str) -> str:
    """Apply a compiled profile to text. Never fails."""
    return transformation.execute(text)


class ClipboardSanitizer:
    """Decodes clipboard bytes and sanitizes the text with a profile."""

    def __init__(
        self,
        profile_set: ProfileSet,
        resolver: Optional[TargetEncodingResolver] = None,
        decoder: Optional[ByteDecoder] = None,
    ) -> None:
        self.profile_set = profile_set
        self.resolver = resolver or TargetEncodingResolver()
        self.decoder = decoder or ByteDecoder()

    def resolve_charset(
        self, target: Optional[str] = None, encoding: Optional[str] = None
    ) -> Optional[str]:
        """Charset to decode with: the explicit one, else the target's, else UTF-8."""
        if encoding:
            return encoding.lower()
        if target:
            return self.resolver.resolve(target)
        return UTF_8

    def choose_profile(self, name: Optional[str] = None) -> Optional[TextTransformation]:
        """Named profile, else the default profile, else the identity profile.

        Returns None only when a name is given that is not in the profile set.
        """
        if name is not None:
            return self.profile_set.select(name)
        return self.profile_set.default() or TextTransformation.identity()

    def prepare_display(self, text: str) -> Tuple[str, bool]:
        """Replace control characters for display.

        Uses the configured GUI replacement profile when there is one, else
        substitutes U+FFFD.

        Returns:
            Tuple of (display text, whether control characters were found)
        """
        if not contains_control_chars(text):
            return text, False
        replacement = self.profile_set.gui_replacement()
        if replacement is not None:
            return replacement.execute(text), True
        return replace_control_chars(text), True

    def start(
        self, target: Optional[str] = None, encoding: Optional[str] = None
    ) -> SanitizeResult:
        """Open a result for one run and resolve its charset.

        The result carries a fresh correlation ID. When no charset can be
        resolved it already holds the error diagnostic.
        """
        charset = self.resolve_charset(target, encoding)
        result = SanitizeResult(text=None, charset=charset, correlation_id=new_correlation_id())
        if charset is None:
            result.add_diagnostic(
                DiagnosticSeverity.ERROR,
                f"Could not determine the encoding of target {target!r}",
                "encoding",
                {"target": target},
            )
            logger.bind(result.correlation_id).info(
                "No charset for target", extra={"target": target}
            )
        return result

    def decode_data(self, result: SanitizeResult, data: bytes) -> Optional[str]:
        """Decode with the result's charset, recording a diagnostic on failure."""
        decoded = self.decoder.decode(result.charset, data)
        if decoded is None:
            result.add_diagnostic(
                DiagnosticSeverity.ERROR,
                f"Could not convert data to {result.charset!r}",
                "encoding",
                {"charset": result.charset, "size": len(data)},
            )
            logger.bind(result.correlation_id).info(
                "Decoding failed", extra={"charset": result.charset, "size": len(data)}
            )
        return decoded

    def display(self, result: SanitizeResult, decoded: str) -> str:
        """Run the display pass and record it on the result."""
        display_text, has_control_chars = self.prepare_display(decoded)
        result.display_text = display_text
        result.control_chars_found = has_control_chars
        if has_control_chars:
            result.add_diagnostic(DiagnosticSeverity.WARNING, CONTROL_CHARS_MESSAGE, "display")
        return display_text

    def transform(
        self, result: SanitizeResult, text: str, profile: Optional[str] = None
    ) -> Optional[str]:
        """Apply the selected profile, storing the text and profile name on the result."""
        transformation = self.choose_profile(profile)
        if transformation is None:
            result.add_diagnostic(
                DiagnosticSeverity.ERROR,
                f"Unknown transformation profile {profile!r}",
                "profile",
                {"available": self.profile_set.names()},
            )
            return None

        result.profile = transformation.name
        result.text = transformation.execute(text)
        logger.bind(result.correlation_id).debug(
            "Sanitized clipboard data",
            extra={
                "charset": result.charset,
                "profile": transformation.name,
                "input_chars": len(text),
                "output_chars": len(result.text),
            },
        )
        return result.text

    def sanitize(
        self,
        data: bytes,
        target: Optional[str] = None,
        encoding: Optional[str] = None,
        profile: Optional[str] = None,
    ) -> SanitizeResult:
        """Run the full pipeline on one clipboard buffer.

        Args:
            data: Raw clipboard bytes
            target: Clipboard target name the bytes were requested as
            encoding: Charset label overriding the one implied by the target
            profile: Profile name; the default profile is used when omitted

        Returns:
            SanitizeResult; ``text`` is None if any stage could not produce text
        """
        result = self.start(target, encoding)
        if result.charset is None:
            return result

        decoded = self.decode_data(result, data)
        if decoded is None:
            return result

        display_text = self.display(result, decoded)
        self.transform(result, display_text, profile)
        return result
