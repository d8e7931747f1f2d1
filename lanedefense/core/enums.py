"""Enumerations used throughout the engine."""

from __future__ import annotations

from enum import IntEnum, unique


@unique
class Side(IntEnum):
    """Which population an entity belongs to."""

    ATTACKER = 0
    DEFENDER = 1

    @property
    def opponent(self) -> Side:
        return Side.DEFENDER if self is Side.ATTACKER else Side.ATTACKER


@unique
class Archetype(IntEnum):
    """Concrete unit types. Attackers first, then defenders."""

    TANK = 0
    SONIC_TANK = 1      # Heavy attacker: slower, longer range, harder hits
    ROCKET_TOWER = 10
    LASER_TOWER = 11


@unique
class FireStyle(IntEnum):
    """How an archetype delivers its damage (selected at spawn time)."""

    CANNON = 0
    SONIC = 1
    ROCKET = 2
    LASER = 3


@unique
class LockState(IntEnum):
    """Target-lock hysteresis states."""

    UNLOCKED = 0
    LOCKED = 1
    GRACE = 2       # Locked target out of range, still tracked


@unique
class MoveState(IntEnum):
    """Attacker movement states (published for renderers)."""

    CRUISING = 0
    STALLED = 1     # No open neighbour, counting toward retreat
    RETREATING = 2
    ENGAGED = 3
    ESCAPED = 4


@unique
class Domain(IntEnum):
    """RNG domains for deterministic randomness isolation."""

    SPAWN_ROW = 0
    ARCHETYPE = 1
