"""Textual bridge for atom watchers. Opt-in — requires textual.

Watchers registered through on_change() usually touch widgets, so they run
only while the app is running, and always on the thread that registered
them (commits from a timer or worker thread are handed over with
call_from_thread).

While an app is inside a hold(app) block, e.g. during a screen swap, changes
are not dropped. Each bridged watcher remembers the earliest "old" and the
latest "new" value it missed and gets a single call with them when the
outermost block exits. Nothing is delivered if the value ended up where it
started.
"""

import logging
import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

logger = logging.getLogger("synctomic.textual")

# id(app) -> [hold depth, {watcher token: (deliver, new, old)}]
_holds: dict[int, list] = {}
_holds_lock = threading.Lock()


@contextmanager
def hold(app):
    """Defer bridged watchers for app until the block exits, then catch up."""
    key = id(app)
    with _holds_lock:
        entry = _holds.setdefault(key, [0, {}])
        entry[0] += 1
    try:
        yield
    finally:
        with _holds_lock:
            entry[0] -= 1
            missed = {}
            if entry[0] == 0:
                missed = _holds.pop(key)[1]
        if app.is_running:
            for deliver, new, old in missed.values():
                if new != old:
                    deliver(new, old)


def is_held(app) -> bool:
    with _holds_lock:
        return id(app) in _holds


def _defer(app, token, deliver, new, old) -> bool:
    """Record a missed change if app is held. Returns whether it was held."""
    with _holds_lock:
        entry = _holds.get(id(app))
        if entry is None:
            return False
        earlier = entry[1].get(token)
        entry[1][token] = (deliver, new, earlier[2] if earlier else old)
        return True


def _forget(token) -> None:
    with _holds_lock:
        for _, missed in _holds.values():
            missed.pop(token, None)


def on_change(app, atom, path_or_check, action):
    """atom.on_change() for actions that update app's widgets.

    A NoMatches raised by the action (the widget it queries is gone) is
    logged at DEBUG and dropped; any other error goes to the atom's watcher
    error handling. Returns a disposer that also cancels a held delivery.
    """
    home = threading.get_ident()
    token = object()

    def _apply(new, old):
        try:
            action(new, old)
        except NoMatches:
            logger.debug("Watcher target widget missing; change skipped")

    def _deliver(new, old):
        if threading.get_ident() == home:
            _apply(new, old)
        else:
            app.call_from_thread(_apply, new, old)

    def _bridge(new, old):
        if not app.is_running:
            return
        if not _defer(app, token, _deliver, new, old):
            _deliver(new, old)

    dispose = atom.on_change(path_or_check, _bridge)

    def _dispose():
        dispose()
        _forget(token)

    return _dispose
