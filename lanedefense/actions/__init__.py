"""Action system: hit-effect descriptors and the combat scheduler."""

from lanedefense.actions.combat import CombatScheduler, FireEvent, HitNotice
from lanedefense.actions.fire import FIRE_STRATEGIES, Shot, get_fire_strategy

__all__ = ["CombatScheduler", "FIRE_STRATEGIES", "FireEvent", "HitNotice", "Shot", "get_fire_strategy"]
