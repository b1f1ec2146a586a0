"""Exception hierarchy for configuration loading and template compilation.

All of these are raised while a configuration is loaded and its profiles are
compiled. Applying a compiled profile never raises, and a failed byte decode
is reported as ``None`` rather than as an exception.
"""

from typing import Any, List, Optional


class CleanerError(Exception):
    """Base exception for all clipboard cleaner errors."""


class ConfigError(CleanerError):
    """Exception raised for a malformed configuration document or entry."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


class ConfigNotFoundError(ConfigError):
    """Exception raised when no configuration file exists in any search path."""


class UnknownFilterReference(ConfigError):
    """A transformation references a filter name missing from the filter mapping."""

    def __init__(self, name: str, profile: Optional[str] = None):
        location = f" in profile {profile!r}" if profile else ""
        super().__init__(
            f"Unknown filter reference {name!r}{location}",
            field_name="filters",
        )
        self.name = name
        self.profile = profile


class PatternSyntaxError(CleanerError):
    """Exception raised for an unrecognized ``{tag}`` in a replacement template."""

    def __init__(self, template: str, tag: Any, position: int):
        super().__init__(
            f"Syntax error in replacement pattern {template!r}: "
            f"unknown tag {{{tag}}} at position {position}"
        )
        self.template = template
        self.tag = tag
        self.position = position
