"""Slot arena for entities with generation-checked handles.

A handle stays valid only while the slot it names holds the same
generation. Removing an entity bumps the slot generation, so any handle
still pointing at it resolves to ``None`` even after the slot is reused.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from lanedefense.core.enums import Side
from lanedefense.core.models import Entity


@dataclass(frozen=True, slots=True)
class EntityHandle:
    index: int
    generation: int

    @property
    def key(self) -> int:
        """Stable integer id for external consumers (API, events)."""
        return (self.generation << 20) | self.index

    @classmethod
    def from_key(cls, key: int) -> EntityHandle:
        return cls(index=key & 0xFFFFF, generation=key >> 20)

    def __repr__(self) -> str:
        return f"#{self.index}.{self.generation}"


class EntityArena:
    """Owns every entity; iteration yields live slots in index order."""

    __slots__ = ("_slots", "_generations", "_free")

    def __init__(self) -> None:
        self._slots: list[Entity | None] = []
        self._generations: list[int] = []
        self._free: list[int] = []

    def insert(self, entity: Entity) -> EntityHandle:
        if self._free:
            # Reuse the lowest free slot for deterministic layout
            self._free.sort(reverse=True)
            idx = self._free.pop()
            self._slots[idx] = entity
        else:
            idx = len(self._slots)
            self._slots.append(entity)
            self._generations.append(0)
        handle = EntityHandle(idx, self._generations[idx])
        entity.handle = handle
        return handle

    def get(self, handle: EntityHandle | None) -> Entity | None:
        if handle is None:
            return None
        idx = handle.index
        if idx < 0 or idx >= len(self._slots):
            return None
        if self._generations[idx] != handle.generation:
            return None
        return self._slots[idx]

    def remove(self, handle: EntityHandle) -> Entity | None:
        entity = self.get(handle)
        if entity is None:
            return None
        idx = handle.index
        self._slots[idx] = None
        self._generations[idx] += 1
        self._free.append(idx)
        return entity

    def __contains__(self, handle: EntityHandle) -> bool:
        return self.get(handle) is not None

    def __iter__(self) -> Iterator[Entity]:
        for entity in self._slots:
            if entity is not None:
                yield entity

    def __len__(self) -> int:
        return len(self._slots) - len(self._free)

    def of_side(self, side: Side) -> list[Entity]:
        return [e for e in self if e.side is side]

    def attackers(self) -> list[Entity]:
        return self.of_side(Side.ATTACKER)

    def defenders(self) -> list[Entity]:
        return self.of_side(Side.DEFENDER)
