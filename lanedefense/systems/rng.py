"""Seeded, stateless RNG built on xxhash.

A draw is a pure function of ``(seed, domain, key, salt)``. Spawn rows and
archetypes are keyed by the spawn attempt counter, so a run replays
exactly from its seed and placements whatever the tick length.
"""

from __future__ import annotations

import struct
from typing import Sequence, TypeVar

import xxhash

from lanedefense.core.enums import Domain

T = TypeVar("T")

_PACK = struct.Struct("<qiqq")
# 53 random bits fill a double's mantissa exactly, so floats stay below 1.0
_FLOAT_SCALE = 1.0 / (1 << 53)


class DeterministicRNG:
    """Domain-separated pseudo-random draws with no internal state."""

    __slots__ = ("_seed",)

    def __init__(self, seed: int) -> None:
        self._seed = seed

    @property
    def seed(self) -> int:
        return self._seed

    def _hash(self, domain: Domain, key: int, salt: int) -> int:
        return xxhash.xxh64_intdigest(_PACK.pack(self._seed, domain.value, key, salt))

    def next_float(self, domain: Domain, key: int, salt: int = 0) -> float:
        """Uniform float in [0.0, 1.0)."""
        return (self._hash(domain, key, salt) >> 11) * _FLOAT_SCALE

    def next_int(self, domain: Domain, key: int, low: int, high: int, salt: int = 0) -> int:
        """Uniform integer in [low, high] inclusive."""
        if high < low:
            raise ValueError(f"empty range [{low}, {high}]")
        return low + int(self.next_float(domain, key, salt) * (high - low + 1))

    def next_bool(self, domain: Domain, key: int, probability: float = 0.5, salt: int = 0) -> bool:
        """True with *probability*."""
        return self.next_float(domain, key, salt) < probability

    def choice(self, domain: Domain, key: int, items: Sequence[T], salt: int = 0) -> T:
        """One element of a non-empty *items*, uniformly."""
        return items[self.next_int(domain, key, 0, len(items) - 1, salt)]
