"""AI layer: path search, lane movement, target acquisition."""

from lanedefense.ai.movement import MovementController
from lanedefense.ai.pathfinding import Pathfinder, simplify_path
from lanedefense.ai.targeting import TargetAcquisition

__all__ = ["MovementController", "Pathfinder", "TargetAcquisition", "simplify_path"]
