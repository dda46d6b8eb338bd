"""Deep paths — dotted strings parsed once into a sequence of segments.

    DeepPath.parse("foo.bar")({"foo": {"bar": 1}})  # 1
    DeepPath.parse("foo.nope.bar")({"foo": {}})    # None
    DeepPath.parse("")(value)                      # value

Resolution never raises: an absent segment, or a None along the way,
resolves the whole path to None.
"""

from __future__ import annotations

from typing import Any


class DeepPath:
    """Parsed dotted path. Callable as a projection from a value to a sub-value."""

    __slots__ = ("_segments",)

    def __init__(self, segments: tuple[str, ...] = ()) -> None:
        self._segments = tuple(segments)

    @classmethod
    def parse(cls, path: str) -> DeepPath:
        """Split on '.', stripping each segment. Blank means the whole value."""
        if not path.strip():
            return cls(())
        return cls(tuple(segment.strip() for segment in path.split(".")))

    @property
    def segments(self) -> tuple[str, ...]:
        return self._segments

    def resolve(self, value: Any) -> Any:
        current = value
        for segment in self._segments:
            if current is None:
                return None
            current = _step(current, segment)
        return current

    __call__ = resolve

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DeepPath):
            return NotImplemented
        return self._segments == other._segments

    def __hash__(self) -> int:
        return hash(self._segments)

    def __str__(self) -> str:
        return ".".join(self._segments)

    def __repr__(self) -> str:
        return f"DeepPath({str(self)!r})"


def _step(current: Any, segment: str) -> Any:
    if isinstance(current, dict):
        if segment in current:
            return current[segment]
        # Integer keys survive cloning; allow "3" to address them.
        index = _as_index(segment)
        return current.get(index) if index is not None else None
    if isinstance(current, (list, tuple)):
        index = _as_index(segment)
        if index is not None and index < len(current):
            return current[index]
    return None


def _as_index(segment: str) -> int | None:
    return int(segment) if segment.isdigit() and segment.isascii() else None
