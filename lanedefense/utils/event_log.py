"""Bounded, thread-safe feed of simulation events for the HTTP host."""

from __future__ import annotations

import threading
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping


@dataclass(frozen=True, slots=True)
class SimEvent:
    """Something observable that happened during one tick."""

    tick: int
    category: str     # "spawned", "fire", "hit_spark", "killed", "placed", ...
    message: str
    entity_ids: tuple[int, ...] = ()  # handle keys of the entities involved
    metadata: Mapping[str, Any] = field(default_factory=dict)


class EventLog:
    """Ring buffer of ``SimEvent`` with per-category running totals.

    The engine thread appends one tick batch at a time; API threads read
    copies. Totals keep counting after old events fall off the buffer.
    """

    __slots__ = ("_buffer", "_totals", "_lock")

    def __init__(self, maxlen: int | None = 5000) -> None:
        self._buffer: deque[SimEvent] = deque(maxlen=maxlen)
        self._totals: Counter[str] = Counter()
        self._lock = threading.Lock()

    def append(self, event: SimEvent) -> None:
        self.extend((event,))

    def extend(self, events: Iterable[SimEvent]) -> None:
        with self._lock:
            for event in events:
                self._buffer.append(event)
                self._totals[event.category] += 1

    def since_tick(self, tick: int, categories: Iterable[str] | None = None) -> list[SimEvent]:
        """Buffered events from *tick* onward, optionally limited to *categories*."""
        wanted = frozenset(categories) if categories is not None else None
        with self._lock:
            return [
                e for e in self._buffer
                if e.tick >= tick and (wanted is None or e.category in wanted)
            ]

    def latest(self, count: int = 50) -> list[SimEvent]:
        if count <= 0:
            return []
        with self._lock:
            if count >= len(self._buffer):
                return list(self._buffer)
            return list(self._buffer)[-count:]

    def totals(self) -> dict[str, int]:
        """Events seen per category since the last ``clear``."""
        with self._lock:
            return dict(self._totals)

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)

    def clear(self) -> None:
        with self._lock:
            self._buffer.clear()
            self._totals.clear()
