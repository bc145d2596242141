"""Typed access to untyped TOML data.

``tomllib`` hands back plain dicts of ``object``. These helpers validate at the
boundary so configuration code can work with narrowed types.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TypeGuard, cast

StrDict = dict[str, object]


class WrongType(TypeError):
    """A key is present but holds a value of the wrong type."""

    def __init__(self, key: str, expected: str, value: object) -> None:
        super().__init__(f"'{key}' must be {expected}, got {type(value).__name__}")
        self.key = key


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    """Get a nested table (dict with string keys) from a mapping."""
    return as_str_dict(table.get(key))


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value, stripped.

    Returns None if missing or empty after stripping.

    Raises:
        WrongType: If the value is present but not a string.
    """
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise WrongType(key, "a string", value)
    return value.strip() or None


def get_bool(table: Mapping[str, object], key: str) -> bool | None:
    """Get a boolean value, or None if missing.

    Raises:
        WrongType: If the value is present but not a boolean.
    """
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise WrongType(key, "a boolean", value)
    return value


def get_str_list(table: Mapping[str, object], key: str) -> tuple[str, ...] | None:
    """Get a list of strings as a tuple, or None if missing.

    Raises:
        WrongType: If the value is not a list of strings.
    """
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise WrongType(key, "a list of strings", value)
    items = cast(list[object], value)
    if not all(isinstance(item, str) for item in items):
        raise WrongType(key, "a list of strings", value)
    return tuple(cast(list[str], items))
