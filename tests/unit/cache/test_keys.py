"""
polycache — Cache Key Tests

Tests key validation and composite key construction.
"""

import pytest

from polycache.cache.keys import (
    FORBIDDEN_CHARACTERS,
    create_key,
    create_key_from_sequence,
    find_forbidden_character,
    validate_key,
)
from polycache.errors import InvalidArgumentError, InvalidKeyError


class TestValidateKey:
    """Test suite for validate_key."""

    @pytest.mark.parametrize("key", ["user~1", "a", "with space", "dots.and-dashes_1", "ünïcödé"])
    def test_valid_keys_are_returned_unchanged(self, key: str) -> None:
        """Keys without forbidden characters pass through."""
        assert validate_key(key) == key

    def test_empty_key_rejected(self) -> None:
        """An empty key is invalid."""
        with pytest.raises(InvalidKeyError) as exc_info:
            validate_key("")
        assert exc_info.value.character is None
        assert "length is 0" in exc_info.value.message

    @pytest.mark.parametrize("char", list(FORBIDDEN_CHARACTERS))
    def test_each_forbidden_character_rejected(self, char: str) -> None:
        """Every forbidden character is reported by the error."""
        with pytest.raises(InvalidKeyError) as exc_info:
            validate_key(f"user{char}1")
        assert exc_info.value.character == char
        assert exc_info.value.details["character"] == char
        assert exc_info.value.message == f"Invalid character found in the key: {char}"

    def test_first_offending_character_reported(self) -> None:
        """With several forbidden characters the first one is reported."""
        with pytest.raises(InvalidKeyError) as exc_info:
            validate_key("a@b:c")
        assert exc_info.value.character == "@"

    @pytest.mark.parametrize("key", [None, 1, b"bytes", ["a"]])
    def test_non_string_key_rejected(self, key: object) -> None:
        """Keys must be strings."""
        with pytest.raises(InvalidKeyError):
            validate_key(key)

    def test_invalid_key_is_an_invalid_argument(self) -> None:
        """InvalidKeyError belongs to the invalid-argument family."""
        with pytest.raises(InvalidArgumentError):
            validate_key("bad:key")

    def test_find_forbidden_character(self) -> None:
        """find_forbidden_character returns None for clean keys."""
        assert find_forbidden_character("clean") is None
        assert find_forbidden_character("a/b") == "/"
        assert find_forbidden_character("back\\slash") == "\\"


class TestCreateKey:
    """Test suite for composite key construction."""

    def test_joins_with_tilde(self) -> None:
        """Fragments are joined with the delimiter."""
        assert create_key("user", 1, "profile") == "user~1~profile"

    def test_nested_structure_flattens_identically(self) -> None:
        """Nesting depth does not change the resulting key."""
        flat = create_key("a", "b", "c", "d")
        assert create_key("a", ["b", "c"], "d") == flat
        assert create_key(["a", ["b", ("c", ["d"])]]) == flat

    def test_mapping_values_are_flattened_in_order(self) -> None:
        """Mapping values contribute in insertion order."""
        assert create_key("q", {"x": 1, "y": [2, 3]}) == "q~1~2~3"

    def test_scalar_stringification(self) -> None:
        """None and booleans stringify the way the key scheme expects."""
        assert create_key("a", None, True, False, 2.5) == "a~~1~~2.5"

    def test_no_arguments(self) -> None:
        """No fragments produce an empty key."""
        assert create_key() == ""

    def test_composition_does_not_validate(self) -> None:
        """Forbidden characters survive composition; validation is separate."""
        key = create_key("a:b", "c")
        assert key == "a:b~c"
        with pytest.raises(InvalidKeyError):
            validate_key(key)

    def test_create_key_from_sequence_does_not_flatten(self) -> None:
        """A flat sequence is joined as-is."""
        assert create_key_from_sequence(["a", 1, "b"]) == "a~1~b"
        assert create_key_from_sequence(("x",)) == "x"
