"""Version stamps — comparable markers for detecting stale commits.

A stamp pairs a high-resolution monotonic reading with a process-wide
sequence number, so two stamps taken within the same nanosecond still differ
and still order correctly. Stamps carry no wall-clock meaning.
"""

from __future__ import annotations

import itertools
import time
from dataclasses import dataclass

# itertools.count is thread-safe (C-level GIL atomic)
_sequence = itertools.count(1)


@dataclass(frozen=True, order=True)
class VersionStamp:
    """Comparison is lexicographic: monotonic reading first, then sequence."""

    nanos: int
    sequence: int

    def __repr__(self) -> str:
        return f"VersionStamp({self.nanos}:{self.sequence})"


class Clock:
    """Source of strictly advancing VersionStamps."""

    def __init__(self, timer=time.perf_counter_ns) -> None:
        self._timer = timer

    def now(self) -> VersionStamp:
        return VersionStamp(nanos=self._timer(), sequence=next(_sequence))
