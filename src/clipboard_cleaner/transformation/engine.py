"""Compiled transformations: actions, single steps and whole profiles.

Compilation resolves every filter reference against the configuration and
parses every replacement template once. The resulting objects keep no
reference to the configuration and never change afterwards, so a compiled
profile can be shared freely and applied any number of times.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..character.char_filter import CharFilter
from ..shared.config import (
    ActionDefinition,
    ActionKind,
    Config,
    TransformationDefinition,
    TransformationProfile,
)
from ..shared.logging import get_logger
from .patterns import ReplacementTemplate

logger = get_logger(__name__, None, "transformation")


@dataclass(frozen=True)
class TransformationAction:
    """Compiled action: remove the character, or replace it by a rendered template.

    ``template`` is None for remove actions.
    """

    template: Optional[ReplacementTemplate] = None

    @property
    def kind(self) -> ActionKind:
        return ActionKind.REMOVE if self.template is None else ActionKind.REPLACE

    @classmethod
    def remove(cls) -> "TransformationAction":
        return cls()

    @classmethod
    def replace(cls, template: str) -> "TransformationAction":
        return cls(ReplacementTemplate.parse(template))

    @classmethod
    def from_config(cls, definition: ActionDefinition) -> "TransformationAction":
        """Compile an action definition, parsing its template."""
        if definition.kind is ActionKind.REMOVE:
            return cls.remove()
        return cls.replace(definition.template or "")

    def execute(self, ch: str) -> str:
        """Return the text that takes the place of ``ch`` (empty when removed)."""
        if self.template is None:
            return ""
        return self.template.render(ch)


@dataclass(frozen=True)
class SimpleTransformation:
    """One profile step: a list of filters sharing one action."""

    filters: Tuple[CharFilter, ...]
    action: TransformationAction

    @classmethod
    def from_config(
        cls,
        config: Config,
        definition: TransformationDefinition,
        profile: Optional[str] = None,
    ) -> "SimpleTransformation":
        """Compile a step, resolving its filter references against ``config``.

        Raises:
            UnknownFilterReference: if a ``ref`` names an undeclared filter
            ConfigError: if a filter entry is malformed
            PatternSyntaxError: if the replacement template is invalid
        """
        filters: List[CharFilter] = []
        for wrapped in definition.filters:
            filter_definition = wrapped.resolve(config, profile)
            if filter_definition is None:
                logger.debug(
                    "Skipping filter reference without definition",
                    extra={"profile": profile, "filter": wrapped},
                )
                continue
            filters.append(CharFilter.from_config(filter_definition))

        return cls(tuple(filters), TransformationAction.from_config(definition.action))

    def execute(self, text: str) -> str:
        """Rewrite every character matched by one of the filters.

        Filters are tried in order and the first match wins; characters no
        filter matches are copied unchanged.
        """
        if not self.filters:
            return text

        output: List[str] = []
        for ch in text:
            for char_filter in self.filters:
                if char_filter.matches(ch):
                    output.append(self.action.execute(ch))
                    break
            else:
                output.append(ch)
        return "".join(output)


@dataclass(frozen=True)
class TextTransformation:
    """Compiled profile: steps applied left to right, each on the previous output."""

    name: str
    steps: Tuple[SimpleTransformation, ...] = ()
    display_name: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def identity(cls) -> "TextTransformation":
        return cls.from_config(Config(), TransformationProfile.identity())

    @classmethod
    def from_config(
        cls, config: Config, profile: TransformationProfile
    ) -> "TextTransformation":
        """Compile a profile against the configuration it was declared in."""
        steps = tuple(
            SimpleTransformation.from_config(config, definition, profile.name)
            for definition in profile.transformations
        )
        logger.debug(
            "Compiled transformation profile",
            extra={"profile": profile.name, "steps": len(steps)},
        )
        return cls(
            name=profile.name,
            steps=steps,
            display_name=profile.display_name,
            description=profile.description,
        )

    @property
    def is_identity(self) -> bool:
        return not self.steps

    def execute(self, text: str) -> str:
        for step in self.steps:
            text = step.execute(text)
        return text
