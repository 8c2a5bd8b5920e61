"""Server module."""

from .server import VizServer

__all__ = ["VizServer"]
