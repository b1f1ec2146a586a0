"""Tests for character filters."""

import pytest

from clipboard_cleaner.character.char_filter import (
    CharFilter,
    RangeComponent,
    SingleCharacter,
)
from clipboard_cleaner.shared.config import CharacterFilterDefinition, CharacterRange
from clipboard_cleaner.shared.errors import ConfigError


class TestComponents:
    """Test single-character and range components."""

    def test_single_character_matches_only_itself(self):
        """Test that a single component matches exactly one character."""
        component = SingleCharacter("a")
        assert component.matches("a")
        assert not component.matches("b")
        assert not component.matches("A")

    def test_range_is_inclusive(self):
        """Test that both range bounds match."""
        component = RangeComponent("a", "c")
        assert component.matches("a")
        assert component.matches("b")
        assert component.matches("c")
        assert not component.matches("d")
        assert not component.matches("`")

    def test_reversed_range_matches_nothing(self):
        """Test that a range with first > last never matches."""
        component = RangeComponent("z", "a")
        for ch in "amz":
            assert not component.matches(ch)

    def test_range_beyond_bmp(self):
        """Test ranges over supplementary plane characters."""
        component = RangeComponent(chr(0xE0000), chr(0xE007F))
        assert component.matches(chr(0xE0041))
        assert not component.matches(chr(0x1F600))


class TestCharFilter:
    """Test the union semantics of CharFilter."""

    def test_empty_filter_matches_nothing(self):
        """Test that a filter without components never matches."""
        char_filter = CharFilter()
        assert char_filter.components == ()
        assert not char_filter.matches("a")

    def test_union_of_components(self):
        """Test that any matching component is enough."""
        char_filter = CharFilter([SingleCharacter("x"), RangeComponent("0", "9")])
        assert char_filter.matches("x")
        assert char_filter.matches("5")
        assert not char_filter.matches("y")

    def test_components_preserve_order(self):
        """Test that components keep their declaration order."""
        components = [RangeComponent("a", "z"), SingleCharacter("!")]
        char_filter = CharFilter(components)
        assert char_filter.components == tuple(components)

    def test_equality_and_hash(self):
        """Test value semantics of compiled filters."""
        first = CharFilter([SingleCharacter("a")])
        second = CharFilter([SingleCharacter("a")])
        assert first == second
        assert hash(first) == hash(second)
        assert first != CharFilter([SingleCharacter("b")])

    def test_repr_lists_components(self):
        """Test that repr shows the components."""
        assert "SingleCharacter" in repr(CharFilter([SingleCharacter("a")]))


class TestCharFilterFromConfig:
    """Test compiling filter definitions."""

    def test_single_and_range_entries(self):
        """Test that single and start/end entries become components."""
        definition = CharacterFilterDefinition(
            ranges=(CharacterRange.for_single(0x7F), CharacterRange.for_range(0x00, 0x1F))
        )
        char_filter = CharFilter.from_config(definition)

        assert char_filter.components == (
            SingleCharacter(chr(0x7F)),
            RangeComponent(chr(0x00), chr(0x1F)),
        )
        assert char_filter.matches("\x7f")
        assert char_filter.matches("\x01")
        assert not char_filter.matches(" ")

    def test_single_takes_precedence_over_range(self):
        """Test that an entry with both single and range uses single."""
        definition = CharacterFilterDefinition(
            ranges=(CharacterRange(single=0x41, start=0x61, end=0x7A),)
        )
        char_filter = CharFilter.from_config(definition)
        assert char_filter.components == (SingleCharacter("A"),)

    def test_entry_with_only_start_is_rejected(self):
        """Test that a half-open entry fails compilation."""
        definition = CharacterFilterDefinition(ranges=(CharacterRange(start=0x41),))
        with pytest.raises(ConfigError) as exc_info:
            CharFilter.from_config(definition)
        assert "Invalid character range" in str(exc_info.value)

    def test_empty_entry_is_rejected(self):
        """Test that an entry with no fields fails compilation."""
        definition = CharacterFilterDefinition(ranges=(CharacterRange(),))
        with pytest.raises(ConfigError):
            CharFilter.from_config(definition)

    def test_reversed_range_is_accepted(self, caplog):
        """Test that a reversed range compiles, warns and matches nothing."""
        definition = CharacterFilterDefinition(ranges=(CharacterRange.for_range(0x7A, 0x61),))
        with caplog.at_level("WARNING"):
            char_filter = CharFilter.from_config(definition)

        assert not any(char_filter.matches(ch) for ch in "amz")
        assert "Reversed character range" in caplog.text

    def test_empty_definition(self):
        """Test that a definition without ranges matches nothing."""
        char_filter = CharFilter.from_config(CharacterFilterDefinition())
        assert not char_filter.matches("a")

    def test_range_entries_compile_to_range_components(self):
        """Test that configuration range entries and compiled ranges are distinct types."""
        import clipboard_cleaner.character as character
        import clipboard_cleaner.shared as shared

        char_filter = CharFilter.from_config(
            CharacterFilterDefinition(ranges=(CharacterRange.for_range(0x61, 0x7A),))
        )

        assert character.RangeComponent is RangeComponent
        assert shared.CharacterRange is CharacterRange
        assert not hasattr(character, "CharacterRange")
        assert isinstance(char_filter.components[0], RangeComponent)
        assert not isinstance(char_filter.components[0], CharacterRange)
