"""Character filters built from single code points and inclusive ranges.

A :class:`CharFilter` is a union of components. Each component is either a
single character or an inclusive range of code points, and a character
matches the filter as soon as one component matches it.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple, Union

from ..shared.config import CharacterFilterDefinition
from ..shared.errors import ConfigError
from ..shared.logging import get_logger

logger = get_logger(__name__, None, "char_filter")


@dataclass(frozen=True)
class SingleCharacter:
    """Matches exactly one character."""

    char: str

    def matches(self, ch: str) -> bool:
        return ch == self.char


@dataclass(frozen=True)
class RangeComponent:
    """Matches every character whose code point lies in ``[first, last]``.

    A range with ``first > last`` is kept and simply matches nothing.
    """

    first: str
    last: str

    def matches(self, ch: str) -> bool:
        return self.first <= ch <= self.last


CharacterFilterComponent = Union[SingleCharacter, RangeComponent]


class CharFilter:
    """Ordered union of single-character and range components."""

    __slots__ = ("_components",)

    def __init__(self, components: Iterable[CharacterFilterComponent] = ()) -> None:
        self._components: Tuple[CharacterFilterComponent, ...] = tuple(components)

    @property
    def components(self) -> Tuple[CharacterFilterComponent, ...]:
        return self._components

    def matches(self, ch: str) -> bool:
        """Check whether any component matches the character."""
        return any(component.matches(ch) for component in self._components)

    @classmethod
    def from_config(cls, definition: CharacterFilterDefinition) -> "CharFilter":
        """Compile a filter definition.

        Args:
            definition: Filter definition from the configuration

        Returns:
            Compiled CharFilter

        Raises:
            ConfigError: if an entry has neither ``single`` nor both ``start``
                and ``end``
        """
        components = []
        for entry in definition.ranges:
            if entry.single is not None:
                components.append(SingleCharacter(chr(entry.single)))
            elif entry.start is not None and entry.end is not None:
                if entry.start > entry.end:
                    logger.warning(
                        "Reversed character range matches nothing",
                        extra={"start": entry.start, "end": entry.end},
                    )
                components.append(RangeComponent(chr(entry.start), chr(entry.end)))
            else:
                raise ConfigError(
                    "Character range must either be a single character or both "
                    f"start and end characters. Invalid character range: {entry!r}",
                    field_name="ranges",
                )
        return cls(components)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CharFilter):
            return NotImplemented
        return self._components == other._components

    def __hash__(self) -> int:
        return hash(self._components)

    def __repr__(self) -> str:
        return f"CharFilter({list(self._components)!r})"
