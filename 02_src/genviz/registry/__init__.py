"""Connection registry module."""

from .connection import IViewerConnection
from .registry import ConnectionRegistry, IConnectionRegistry

__all__ = ["ConnectionRegistry", "IConnectionRegistry", "IViewerConnection"]
