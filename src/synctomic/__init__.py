"""Synctomic: optimistic, copy-isolated atoms with deep-path watchers."""

from importlib.metadata import version as _version

__version__ = _version("synctomic")

from synctomic._clock import Clock, VersionStamp
from synctomic._clone import CyclicValueError, UnserializableValueError
from synctomic.atom import Atom, build_atom
from synctomic.path import DeepPath
from synctomic.watchers import Watcher
# textual NOT auto-imported — opt-in only

__all__ = [
    "Atom",
    "build_atom",
    "Clock",
    "VersionStamp",
    "DeepPath",
    "Watcher",
    "UnserializableValueError",
    "CyclicValueError",
]
