"""Engine layer: the Simulation tick context."""

from lanedefense.engine.simulation import Simulation

__all__ = ["Simulation"]
