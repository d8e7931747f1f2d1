"""Core data models and world representation."""

from lanedefense.core.arena import EntityArena, EntityHandle
from lanedefense.core.enums import Archetype, Domain, FireStyle, LockState, MoveState, Side
from lanedefense.core.grid import GridMap
from lanedefense.core.models import Cell, Entity, Motion, WaveState, WorldPos
from lanedefense.core.snapshot import EntityView, Snapshot
from lanedefense.core.world_state import WorldState

__all__ = [
    "Archetype",
    "Cell",
    "Domain",
    "Entity",
    "EntityArena",
    "EntityHandle",
    "EntityView",
    "FireStyle",
    "GridMap",
    "LockState",
    "Motion",
    "MoveState",
    "Side",
    "Snapshot",
    "WaveState",
    "WorldPos",
    "WorldState",
]
