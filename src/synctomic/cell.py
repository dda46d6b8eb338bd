"""Value cell — the current value and the stamp of the commit that wrote it.

The cell never hands out its value by reference: snapshot() returns a copy,
and compare_and_commit() stores a copy of what it is given.
"""

from __future__ import annotations

import threading
from typing import Generic, TypeVar

from synctomic._clock import Clock, VersionStamp
from synctomic._clone import clone

T = TypeVar("T")


class ValueCell(Generic[T]):
    """Versioned holder for a single value."""

    __slots__ = ("_value", "_version", "_clock", "lock")

    def __init__(self, value: T, clock: Clock | None = None) -> None:
        self._clock = clock or Clock()
        self._value = clone(value)
        self._version = self._clock.now()
        self.lock = threading.Lock()

    @property
    def version(self) -> VersionStamp:
        return self._version

    def read(self) -> T:
        # The stored value is replaced on commit, never mutated in place, so
        # cloning the current reference needs no lock.
        return clone(self._value)

    def snapshot(self) -> tuple[T, VersionStamp]:
        """Copy of the value together with the version it was read at."""
        with self.lock:
            return clone(self._value), self._version

    def compare_and_commit(self, expected: VersionStamp, value: T, on_commit=None) -> bool:
        """Store a copy of value if nothing has committed since `expected`.

        on_commit(new, previous) runs before the lock is released, so hooks
        see commits in the order they landed. It must not block, and it
        receives the cell's own references, which it must not leak.
        """
        with self.lock:
            if self._version != expected:
                return False
            previous = self._value
            self._value = clone(value)
            self._version = self._clock.now()
            if on_commit is not None:
                on_commit(self._value, previous)
            return True

    def __repr__(self) -> str:
        return f"ValueCell({self._value!r}, {self._version!r})"
