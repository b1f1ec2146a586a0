"""Configuration data model for clipboard sanitization.

This module mirrors the configuration document one-to-one: named character
filters, transformation profiles built from filter references and actions,
and the optional default and GUI replacement profile names. The objects here
are plain, immutable descriptions. Compiling them into executable filters and
templates happens in :mod:`clipboard_cleaner.transformation.engine`.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .errors import ConfigError, UnknownFilterReference

MAX_CODEPOINT = 0x10FFFF

IDENTITY_PROFILE_NAME = "identity"


def parse_codepoint(value: Any, field_name: str) -> int:
    """Convert a configuration codepoint value to an integer.

    Integers are taken as Unicode code points; a one-character string stands
    for its own code point.
    """
    if isinstance(value, bool):
        raise ConfigError(f"Invalid codepoint for {field_name}: {value!r}", field_name)
    if isinstance(value, str) and len(value) == 1:
        return ord(value)
    if not isinstance(value, int):
        raise ConfigError(f"Invalid codepoint for {field_name}: {value!r}", field_name)
    if not 0 <= value <= MAX_CODEPOINT:
        raise ConfigError(
            f"Codepoint out of range for {field_name}: {value:#x}", field_name
        )
    return value


@dataclass(frozen=True)
class CharacterRange:
    """One entry of a filter's ``ranges`` list.

    Either ``single`` is set, or both ``start`` and ``end``. Entries that
    satisfy neither are kept as-is and rejected when the filter is compiled.
    """

    single: Optional[int] = None
    start: Optional[int] = None
    end: Optional[int] = None

    @classmethod
    def for_single(cls, value: int) -> "CharacterRange":
        return cls(single=value)

    @classmethod
    def for_range(cls, start: int, end: int) -> "CharacterRange":
        return cls(start=start, end=end)

    @classmethod
    def from_dict(cls, data: Any) -> "CharacterRange":
        if not isinstance(data, Mapping):
            raise ConfigError(f"Character range must be a mapping, got {data!r}", "ranges")
        values: Dict[str, Optional[int]] = {}
        for key in ("single", "start", "end"):
            raw = data.get(key)
            values[key] = None if raw is None else parse_codepoint(raw, key)
        return cls(**values)

    def to_dict(self) -> Dict[str, int]:
        return {
            key: value
            for key, value in (("single", self.single), ("start", self.start), ("end", self.end))
            if value is not None
        }


@dataclass(frozen=True)
class CharacterFilterDefinition:
    """A named or inline character filter: a list of single/range entries."""

    ranges: Tuple[CharacterRange, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "CharacterFilterDefinition":
        if not isinstance(data, Mapping) or "ranges" not in data:
            raise ConfigError(f"Character filter must define 'ranges': {data!r}", "ranges")
        ranges = data["ranges"] or []
        if not isinstance(ranges, list):
            raise ConfigError("Character filter 'ranges' must be a list", "ranges")
        return cls(ranges=tuple(CharacterRange.from_dict(entry) for entry in ranges))

    def to_dict(self) -> Dict[str, Any]:
        return {"ranges": [entry.to_dict() for entry in self.ranges]}


@dataclass(frozen=True)
class FilterReference:
    """Reference to a filter declared in the top-level ``filters`` mapping."""

    name: str

    def resolve(
        self, config: "Config", profile: Optional[str] = None
    ) -> Optional[CharacterFilterDefinition]:
        """Look the filter up by name.

        Raises:
            UnknownFilterReference: if the name is not declared at all.

        Returns:
            The filter definition, or None if the name is declared without a value.
        """
        if self.name not in config.filters:
            raise UnknownFilterReference(self.name, profile)
        return config.filters[self.name]

    def to_dict(self) -> Dict[str, Any]:
        return {"ref": self.name}


@dataclass(frozen=True)
class InlineFilter:
    """A filter definition given directly inside a transformation."""

    definition: CharacterFilterDefinition

    def resolve(
        self, config: "Config", profile: Optional[str] = None
    ) -> Optional[CharacterFilterDefinition]:
        return self.definition

    def to_dict(self) -> Dict[str, Any]:
        return {"filter": self.definition.to_dict()}


WrappedFilter = Union[FilterReference, InlineFilter]


def wrapped_filter_from_dict(data: Any) -> WrappedFilter:
    """Parse one ``{ref: name}`` or ``{filter: {...}}`` entry."""
    if isinstance(data, Mapping):
        if "ref" in data:
            name = data["ref"]
            if not isinstance(name, str):
                raise ConfigError(f"Filter reference must be a string: {name!r}", "ref")
            return FilterReference(name)
        if "filter" in data:
            return InlineFilter(CharacterFilterDefinition.from_dict(data["filter"]))
    raise ConfigError(
        f"Transformation filter must be {{ref: ...}} or {{filter: ...}}, got {data!r}",
        "filters",
    )


class ActionKind(Enum):
    """Kinds of transformation action."""
    REMOVE = "remove"
    REPLACE = "replace"


@dataclass(frozen=True)
class ActionDefinition:
    """Uncompiled transformation action: ``remove`` or ``{replace: template}``."""

    kind: ActionKind
    template: Optional[str] = None

    @classmethod
    def remove(cls) -> "ActionDefinition":
        return cls(ActionKind.REMOVE)

    @classmethod
    def replace(cls, template: str) -> "ActionDefinition":
        return cls(ActionKind.REPLACE, template)

    @classmethod
    def from_config(cls, data: Any) -> "ActionDefinition":
        if data == "remove":
            return cls.remove()
        if isinstance(data, Mapping) and len(data) == 1:
            if "remove" in data:
                return cls.remove()
            if "replace" in data:
                template = data["replace"]
                if not isinstance(template, str):
                    raise ConfigError(
                        f"Replacement template must be a string: {template!r}", "action"
                    )
                return cls.replace(template)
        raise ConfigError(
            f"Action must be 'remove' or {{replace: <template>}}, got {data!r}", "action"
        )

    def to_config(self) -> Any:
        if self.kind is ActionKind.REMOVE:
            return "remove"
        return {"replace": self.template}


@dataclass(frozen=True)
class TransformationDefinition:
    """One profile step: the filters it applies to and its action."""

    filters: Tuple[WrappedFilter, ...]
    action: ActionDefinition

    @classmethod
    def from_dict(cls, data: Any) -> "TransformationDefinition":
        if not isinstance(data, Mapping):
            raise ConfigError(f"Transformation must be a mapping, got {data!r}", "transformations")
        if "action" not in data:
            raise ConfigError("Transformation is missing 'action'", "action")
        filters = data.get("filters") or []
        if not isinstance(filters, list):
            raise ConfigError("Transformation 'filters' must be a list", "filters")
        return cls(
            filters=tuple(wrapped_filter_from_dict(entry) for entry in filters),
            action=ActionDefinition.from_config(data["action"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filters": [entry.to_dict() for entry in self.filters],
            "action": self.action.to_config(),
        }


@dataclass(frozen=True)
class TransformationProfile:
    """A named, ordered list of transformation steps."""

    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    transformations: Tuple[TransformationDefinition, ...] = ()

    @property
    def label(self) -> str:
        """Name shown to users: the display name when present."""
        return self.display_name or self.name

    @classmethod
    def identity(cls) -> "TransformationProfile":
        """Profile without steps, leaving text unchanged."""
        return cls(
            name=IDENTITY_PROFILE_NAME,
            display_name="Identity transformation",
            description="Does not change the text.",
        )

    @classmethod
    def from_dict(cls, data: Any) -> "TransformationProfile":
        if not isinstance(data, Mapping):
            raise ConfigError(f"Profile must be a mapping, got {data!r}", "profiles")
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ConfigError(f"Profile is missing a 'name': {data!r}", "name")
        transformations = data.get("transformations") or []
        if not isinstance(transformations, list):
            raise ConfigError(
                f"Profile {name!r}: 'transformations' must be a list", "transformations"
            )
        return cls(
            name=name,
            display_name=data.get("display_name"),
            description=data.get("description"),
            transformations=tuple(
                TransformationDefinition.from_dict(entry) for entry in transformations
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"name": self.name}
        if self.display_name is not None:
            result["display_name"] = self.display_name
        if self.description is not None:
            result["description"] = self.description
        result["transformations"] = [step.to_dict() for step in self.transformations]
        return result


@dataclass(frozen=True)
class Config:
    """Complete configuration document.

    Filter definitions are shared by name; ``filters`` maps each declared name
    to its definition, or to None when the document declares the name without
    a value.
    """

    filters: Dict[str, Optional[CharacterFilterDefinition]] = field(default_factory=dict)
    profiles: Tuple[TransformationProfile, ...] = ()
    default_profile_name: Optional[str] = None
    gui_replacement_profile_name: Optional[str] = None

    def __hash__(self) -> int:
        # Dict equality ignores order, so hash the filters as a frozenset.
        return hash((
            frozenset(self.filters.items()),
            self.profiles,
            self.default_profile_name,
            self.gui_replacement_profile_name,
        ))

    def profile(self, name: Optional[str]) -> Optional[TransformationProfile]:
        """Return the first profile with the given name, or None."""
        if name is None:
            return None
        for profile in self.profiles:
            if profile.name == name:
                return profile
        return None

    def default_profile(self) -> Optional[TransformationProfile]:
        return self.profile(self.default_profile_name)

    def gui_replacement_profile(self) -> Optional[TransformationProfile]:
        return self.profile(self.gui_replacement_profile_name)

    def profile_names(self) -> List[str]:
        return [profile.name for profile in self.profiles]

    @classmethod
    def from_dict(cls, data: Any) -> "Config":
        """Create configuration from a parsed document.

        Args:
            data: Mapping as produced by a YAML, JSON or TOML parser

        Raises:
            ConfigError: if the document does not follow the schema
        """
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ConfigError("Configuration document must be a mapping")

        raw_filters = data.get("filters") or {}
        if not isinstance(raw_filters, Mapping):
            raise ConfigError("'filters' must be a mapping of name to filter", "filters")
        filters = {
            str(name): None if value is None else CharacterFilterDefinition.from_dict(value)
            for name, value in raw_filters.items()
        }

        raw_profiles = data.get("profiles") or []
        if not isinstance(raw_profiles, list):
            raise ConfigError("'profiles' must be a list", "profiles")

        return cls(
            filters=filters,
            profiles=tuple(TransformationProfile.from_dict(entry) for entry in raw_profiles),
            default_profile_name=data.get("default_profile"),
            gui_replacement_profile_name=data.get("gui_replacement_profile"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration back to the document schema."""
        result: Dict[str, Any] = {
            "filters": {
                name: None if definition is None else definition.to_dict()
                for name, definition in self.filters.items()
            },
            "profiles": [profile.to_dict() for profile in self.profiles],
        }
        if self.default_profile_name is not None:
            result["default_profile"] = self.default_profile_name
        if self.gui_replacement_profile_name is not None:
            result["gui_replacement_profile"] = self.gui_replacement_profile_name
        return result

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> "Config":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON configuration: {e}") from e
        return cls.from_dict(data)
