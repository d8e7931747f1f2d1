"""Tick-driven lane defense simulation core."""

__version__ = "0.1.0"
