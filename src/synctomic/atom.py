"""Atoms — optimistic, copy-isolated mutable cells.

An Atom holds one value. Writers never lock it: each write runs a mutator
against a private snapshot and commits only if nothing else committed in
the meantime. A stale commit is retried by running the mutator again against
the fresh value (set), or reported to a conflict handler (set_once).

Mutators come in two shapes, told apart by how many required positional
arguments they take:

    atom.set(lambda value: value + 1)           # returns the new value

    def deferred(value, commit):                # commits when it's ready
        threading.Timer(0.1, commit, args=[value + 1]).start()
    atom.set(deferred)

commit() may be called any number of times. Each call is checked against the
version the snapshot was taken at and returns True only if it won.

Every value crossing the boundary (get, snapshots, commits, watcher
arguments) is a deep copy, so callers can never reach the stored value.
"""

from __future__ import annotations

import inspect
import logging
from typing import Callable, Generic, TypeVar

from synctomic._clock import Clock, VersionStamp
from synctomic.cell import ValueCell
from synctomic.watchers import Action, Check, Disposer, ErrorHook, WatcherRegistry
from synctomic.path import DeepPath

logger = logging.getLogger("synctomic.atom")

T = TypeVar("T")

Commit = Callable[[T], bool]
Continuation = Callable[[T, Commit], None]


def _noop() -> None:
    pass


def _as_continuation(mutator: Callable) -> Continuation:
    """Wrap a value-returning mutator so it commits its own result."""
    if not callable(mutator):
        raise TypeError(f"mutator must be callable, got {type(mutator).__name__!r}")

    try:
        parameters = inspect.signature(mutator).parameters.values()
    except (TypeError, ValueError):
        # No introspectable signature (some builtins): treat as fn(value).
        return lambda value, commit: commit(mutator(value))

    positional = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    required = sum(
        1 for p in parameters if p.kind in positional and p.default is inspect.Parameter.empty
    )
    if required >= 2:
        return mutator

    takes_value = any(
        p.kind in positional or p.kind is inspect.Parameter.VAR_POSITIONAL for p in parameters
    )
    if takes_value:
        return lambda value, commit: commit(mutator(value))
    return lambda value, commit: commit(mutator())


class Atom(Generic[T]):
    """A versioned, copy-isolated value with path-scoped watchers."""

    __slots__ = ("_cell", "_watchers", "_max_retries")

    def __init__(
        self,
        value: T,
        *,
        max_retries: int | None = None,
        on_watcher_error: ErrorHook | None = None,
        clock: Clock | None = None,
    ) -> None:
        if max_retries is not None and max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")
        self._cell: ValueCell[T] = ValueCell(value, clock)
        self._watchers = WatcherRegistry(on_watcher_error)
        self._max_retries = max_retries

    @property
    def version(self) -> VersionStamp:
        """Stamp of the last successful commit (or of construction)."""
        return self._cell.version

    def get(self) -> T:
        """Return a deep copy of the current value."""
        return self._cell.read()

    def set(self, mutator: Callable) -> None:
        """Apply mutator, re-running it against fresh data until it commits."""
        continuation = _as_continuation(mutator)
        self._attempt(continuation, retry=True, on_conflict=_noop, retries=0)

    def set_once(self, mutator: Callable, on_conflict: Callable[[], None] | None = None) -> None:
        """Apply mutator once. A stale commit calls on_conflict instead of retrying."""
        continuation = _as_continuation(mutator)
        self._attempt(continuation, retry=False, on_conflict=on_conflict or _noop, retries=0)

    def on_change(self, path_or_check: str | DeepPath | Check, action: Action) -> Disposer:
        """Call action(new, old) whenever the watched part of the value changes.

        path_or_check is a dotted path ("foo.bar", "" for the whole value) or a
        function projecting the value to the part being watched. Returns a
        function that removes the watcher; calling it again is harmless.
        """
        with self._cell.lock:
            return self._watchers.register(path_or_check, action, self._cell.read())

    def _attempt(
        self,
        continuation: Continuation,
        *,
        retry: bool,
        on_conflict: Callable[[], None],
        retries: int,
    ) -> None:
        snapshot, version = self._cell.snapshot()

        def commit(value: T) -> bool:
            if self._cell.compare_and_commit(version, value, self._watchers.enqueue):
                self._watchers.drain()
                return True
            logger.debug("Stale commit against %r", version)
            if not retry:
                on_conflict()
            elif self._max_retries is not None and retries >= self._max_retries:
                logger.warning(
                    "Dropping mutator after %d retries without a successful commit",
                    retries,
                )
            else:
                self._attempt(
                    continuation, retry=True, on_conflict=on_conflict, retries=retries + 1
                )
            return False

        continuation(snapshot, commit)

    def __repr__(self) -> str:
        return f"Atom({self._cell.read()!r})"


def build_atom(
    value: T,
    *,
    max_retries: int | None = None,
    on_watcher_error: ErrorHook | None = None,
    clock: Clock | None = None,
) -> Atom[T]:
    """Create an Atom holding a copy of value.

    Usage:
        settings = build_atom({"theme": {"mode": "dark"}})

        settings.on_change("theme.mode", lambda new, old: print(new["theme"]))
        settings.set(lambda s: {**s, "theme": {"mode": "light"}})
        # prints {'mode': 'light'}
    """
    return Atom(
        value, max_retries=max_retries, on_watcher_error=on_watcher_error, clock=clock
    )
