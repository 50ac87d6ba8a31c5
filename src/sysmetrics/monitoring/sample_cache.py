"""Per-resource baseline cache.

Each resource moves through a two-state machine:

    UNINITIALIZED --(first read)--> HAS_BASELINE --(read, dt > 0)--> HAS_BASELINE

The first successful read only seeds the baseline. Later reads produce an
Interval (previous snapshot, current snapshot, elapsed seconds) and advance
the baseline. A read with dt <= 0 raises DegenerateIntervalError and leaves
the baseline where it was. Failed reads never reach the cache, so a resource
never regresses to UNINITIALIZED.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from sysmetrics.core.errors import DegenerateIntervalError
from sysmetrics.core.schemas import Resource
from sysmetrics.monitoring.snapshots import Snapshot

S = TypeVar("S")

Clock = Callable[[], float]


class CacheState(str, Enum):
    """Baseline state of one resource."""

    UNINITIALIZED = "uninitialized"
    HAS_BASELINE = "has_baseline"


@dataclass(frozen=True)
class CacheEntry:
    """Last accepted snapshot of a resource and when it was taken."""

    snapshot: Snapshot
    timestamp: float


@dataclass(frozen=True)
class Interval(Generic[S]):
    """Two consecutive snapshots of one resource and the time between them."""

    previous: S
    current: S
    dt_seconds: float


class SampleCache:
    """Holds the baseline snapshot of every monitored resource.

    Owned and mutated by the sampler thread only; not thread-safe.
    """

    def __init__(self, clock: Clock = time.monotonic) -> None:
        """Initialize the cache.

        Args:
            clock: Source of timestamps in seconds, used when advance() is
                called without an explicit timestamp.
        """
        self._clock = clock
        self._entries: dict[Resource, CacheEntry] = {}

    def __contains__(self, resource: Resource) -> bool:
        return resource in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def state(self, resource: Resource) -> CacheState:
        if resource in self._entries:
            return CacheState.HAS_BASELINE
        return CacheState.UNINITIALIZED

    def get(self, resource: Resource) -> CacheEntry | None:
        return self._entries.get(resource)

    def advance(
        self, resource: Resource, snapshot: S, timestamp: float | None = None
    ) -> Interval[S] | None:
        """Offer a freshly read snapshot.

        Args:
            resource: Resource the snapshot belongs to
            snapshot: The new snapshot
            timestamp: When it was read (defaults to the cache clock)

        Returns:
            None on the first sample, otherwise the interval against the
            previous baseline

        Raises:
            DegenerateIntervalError: If no time elapsed since the baseline;
                the baseline is kept
        """
        now = self._clock() if timestamp is None else timestamp
        entry = self._entries.get(resource)

        if entry is None:
            self._entries[resource] = CacheEntry(snapshot, now)  # type: ignore[arg-type]
            return None

        dt = now - entry.timestamp
        if dt <= 0:
            raise DegenerateIntervalError(dt)

        self._entries[resource] = CacheEntry(snapshot, now)  # type: ignore[arg-type]
        return Interval(previous=entry.snapshot, current=snapshot, dt_seconds=dt)  # type: ignore[arg-type]
