"""
polycache — Cache Keys

Key validation and composite key construction shared by every backend.

A valid key is a non-empty string that contains none of ``{}()/\\@:``.
Composite keys are built by flattening arguments and joining the fragments
with ``~``.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from ..errors import InvalidKeyError

FORBIDDEN_CHARACTERS = "{}()/\\@:"
KEY_DELIMITER = "~"


def find_forbidden_character(key: str) -> str | None:
    """Return the first forbidden character in ``key``, or None."""
    for char in key:
        if char in FORBIDDEN_CHARACTERS:
            return char
    return None


def validate_key(key: Any) -> str:
    """
    Validate a cache key.

    Args:
        key: Candidate key

    Returns:
        The key, unchanged

    Raises:
        InvalidKeyError: If the key is not a string, is empty, or contains a
            forbidden character
    """
    if not isinstance(key, str):
        raise InvalidKeyError(key, message=f"Invalid key: expected str, got {type(key).__name__}")

    if len(key) == 0:
        raise InvalidKeyError(key)

    char = find_forbidden_character(key)
    if char is not None:
        raise InvalidKeyError(key, character=char)

    return key


def _flatten(parts: Iterable[Any]) -> Iterator[Any]:
    for part in parts:
        if isinstance(part, (list, tuple)):
            yield from _flatten(part)
        elif isinstance(part, Mapping):
            yield from _flatten(part.values())
        else:
            yield part


def _fragment(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    return str(value)


def create_key(*parts: Any) -> str:
    """
    Build a composite key from arbitrarily nested arguments.

    Lists, tuples and mapping values are flattened depth-first, left to right,
    so ``create_key("a", ["b", ("c",)], "d") == create_key("a", "b", "c", "d")``.
    The result is not validated.
    """
    return KEY_DELIMITER.join(_fragment(part) for part in _flatten(parts))


def create_key_from_sequence(parts: Iterable[Any]) -> str:
    """Join an already flat sequence of fragments into a key without flattening."""
    return KEY_DELIMITER.join(_fragment(part) for part in parts)
