"""Watcher registry — path-scoped change notification for an atom.

Each watcher projects the atom's value to a sub-value and remembers the
serialized form of what it last saw. After every successful commit the
registry re-projects, and only watchers whose serialized projection changed
get their action called with (new value, old value).

Failures are isolated: an action that raises is logged, reported to the
optional error hook, and the pass carries on with the next watcher.
Actions run outside the cell lock, so they may read from and write to the
atom freely.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections import deque
from typing import Any, Callable

from synctomic._clone import clone, serialize
from synctomic.path import DeepPath

logger = logging.getLogger("synctomic.watchers")

Action = Callable[[Any, Any], None]
Check = Callable[[Any], Any]
Disposer = Callable[[], None]
ErrorHook = Callable[[BaseException, "Watcher"], None]

_ids = itertools.count(1)


def as_check(path_or_check: str | DeepPath | Check) -> Check:
    """Compile a dotted path into a projection; pass callables through."""
    if isinstance(path_or_check, str):
        return DeepPath.parse(path_or_check)
    if callable(path_or_check):
        return path_or_check
    raise TypeError(
        f"expected a dotted path or a callable, got {type(path_or_check).__name__!r}"
    )


class Watcher:
    """A registered (check, action) pair and its last observed state."""

    __slots__ = ("id", "check", "action", "last_state", "active")

    def __init__(self, check: Check, action: Action, initial_state: str) -> None:
        self.id = next(_ids)
        self.check = check
        self.action = action
        self.last_state = initial_state
        self.active = True

    def __repr__(self) -> str:
        state = "active" if self.active else "disposed"
        return f"Watcher({self.id}, {self.check!r}, {state})"


class WatcherRegistry:
    """Insertion-ordered set of watchers for a single atom.

    Commits queue their pass with enqueue() while the cell is locked, so
    passes line up in commit order, and run them with drain() after the lock
    is released. One thread drains at a time. A commit landing while another
    thread is draining leaves its pass to that thread and returns at once,
    so a slow action never blocks writers on other threads.
    """

    def __init__(self, on_error: ErrorHook | None = None) -> None:
        self._watchers: dict[int, Watcher] = {}
        self._on_error = on_error
        self._passes = 0
        self._pending: deque[tuple[Any, Any]] = deque()
        self._drainer: int | None = None
        # Short critical sections only; never held while an action runs.
        self._guard = threading.Lock()

    def __len__(self) -> int:
        return len(self._watchers)

    def register(self, path_or_check, action: Action, current: Any) -> Disposer:
        """Add a watcher primed with the current value. Returns its disposer."""
        if not callable(action):
            raise TypeError(f"action must be callable, got {type(action).__name__!r}")
        check = as_check(path_or_check)
        watcher = Watcher(check, action, serialize(check(clone(current))))
        with self._guard:
            self._watchers[watcher.id] = watcher

        def _dispose() -> None:
            watcher.active = False
            with self._guard:
                self._watchers.pop(watcher.id, None)

        return _dispose

    def enqueue(self, new: Any, old: Any) -> None:
        with self._guard:
            self._pending.append((new, old))

    def drain(self) -> None:
        """Run queued passes, unless another thread is already running them.

        Called again from inside an action on the draining thread, the nested
        passes run immediately.
        """
        me = threading.get_ident()
        with self._guard:
            if self._drainer is not None and self._drainer != me:
                return
            outermost = self._drainer is None
            self._drainer = me
        try:
            while True:
                with self._guard:
                    if not self._pending:
                        if outermost:
                            self._drainer = None
                        return
                    new, old = self._pending.popleft()
                self.notify(new, old)
        except BaseException:
            if outermost:
                with self._guard:
                    self._drainer = None
            raise

    def notify(self, new: Any, old: Any) -> None:
        """Run one notification pass for a commit from `old` to `new`.

        Iterates over the watchers present when the pass starts. Watchers
        added by an action wait for the next pass; watchers disposed by an
        action are skipped if they have not run yet. If an action commits to
        the atom, the nested pass brings every watcher up to date and this
        one stops.
        """
        self._passes += 1
        current_pass = self._passes
        with self._guard:
            watchers = list(self._watchers.values())
        for watcher in watchers:
            if not watcher.active:
                continue
            try:
                state = serialize(watcher.check(clone(new)))
                if state == watcher.last_state:
                    continue
                watcher.last_state = state
                watcher.action(clone(new), clone(old))
            except Exception as exc:
                logger.exception("Watcher %d failed during notification", watcher.id)
                if self._on_error is not None:
                    self._on_error(exc, watcher)
            if self._passes != current_pass:
                return
