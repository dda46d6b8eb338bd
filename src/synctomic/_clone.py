"""Structural clone and canonical serialization for atom values.

Only plain data is supported: dicts with scalar keys, lists, tuples, str,
int, float, bool and None. Anything else is rejected instead of being
silently dropped, and self-referencing structures are rejected instead of
recursing forever.
"""

from __future__ import annotations

import json
from typing import TypeVar

T = TypeVar("T")

_SCALARS = (str, int, float, bool, type(None))
_SEPARATORS = (",", ":")


class UnserializableValueError(TypeError):
    """Raised when a value falls outside the plain-data model."""


class CyclicValueError(ValueError):
    """Raised when a value contains a reference to one of its ancestors."""


def clone(value: T) -> T:
    """Return an independent deep copy of a plain-data value."""
    return _clone(value, set())


def _clone(value, ancestors: set[int]):
    if isinstance(value, _SCALARS):
        return value

    if not isinstance(value, (dict, list, tuple)):
        raise UnserializableValueError(
            f"cannot store value of type {type(value).__name__!r} in an atom"
        )

    marker = id(value)
    if marker in ancestors:
        raise CyclicValueError("cannot store a self-referencing value in an atom")
    ancestors.add(marker)
    try:
        if isinstance(value, dict):
            result = {}
            for key, item in value.items():
                if not isinstance(key, _SCALARS):
                    raise UnserializableValueError(
                        f"dict keys must be scalars, got {type(key).__name__!r}"
                    )
                result[key] = _clone(item, ancestors)
            return result
        items = [_clone(item, ancestors) for item in value]
        return tuple(items) if isinstance(value, tuple) else items
    finally:
        ancestors.discard(marker)


def serialize(value) -> str:
    """Canonical string form used for change detection.

    Dict keys are written in their own JSON form ('"1"' for the string,
    '1' for the integer) so keys of different types never collide, then
    sorted, so insertion order never matters.
    """
    return json.dumps(
        _normalize(value), sort_keys=True, separators=_SEPARATORS, default=repr
    )


def _normalize(value):
    if isinstance(value, dict):
        return {
            json.dumps(key, default=repr): _normalize(item) for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_normalize(item) for item in value]
    return value
