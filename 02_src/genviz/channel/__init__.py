"""Channel module."""

from .capture import SnapshotCapture
from .channel import Channel

__all__ = ["Channel", "SnapshotCapture"]
