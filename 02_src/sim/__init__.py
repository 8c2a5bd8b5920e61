"""Demo trace feeder."""

from .sim import ISim, Sim

__all__ = ["ISim", "Sim"]
