"""Channel-related data models."""

from dataclasses import dataclass, field
from enum import Enum


class CaptureState(str, Enum):
    """Snapshot capture state of a channel."""

    IDLE = "idle"
    AWAITING_CLIENT = "awaiting_client"
    REQUESTED = "requested"
    CAPTURED = "captured"


@dataclass
class ChannelInfo:
    """Read-only summary of a channel for observability."""

    id: str
    url: str
    asset_path: str
    trace_ids: list[str] = field(default_factory=list)
    viewer_ids: list[str] = field(default_factory=list)
    capture_state: CaptureState = CaptureState.IDLE
