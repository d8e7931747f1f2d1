"""Engine systems: RNG, waves, entity builders, economy."""

from lanedefense.systems.economy import EconomyPort, GoldBank
from lanedefense.systems.rng import DeterministicRNG
from lanedefense.systems.waves import WaveDirector

__all__ = ["DeterministicRNG", "EconomyPort", "GoldBank", "WaveDirector"]
