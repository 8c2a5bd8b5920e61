"""GenViz: live-update visualization server."""

from .app import Application, IApplication
from .channel import Channel, SnapshotCapture
from .collaborators import (
    BrowserLauncher,
    INotebookEmbedder,
    IUrlLauncher,
    NotebookEmbedder,
)
from .config import Settings
from .errors import (
    CaptureError,
    CaptureTimeoutError,
    ChannelNotFoundError,
    DeliveryError,
    GenVizError,
    ProtocolError,
)
from .models import Action, CaptureState, ChannelInfo, ClientMessage, JSONValue
from .registry import ConnectionRegistry, IConnectionRegistry, IViewerConnection
from .server import VizServer
from .session import ChannelHandle, VizSession

__all__ = [
    # Application
    "Application",
    "IApplication",
    "Settings",
    "VizSession",
    "ChannelHandle",
    # Models
    "Action",
    "CaptureState",
    "ChannelInfo",
    "ClientMessage",
    "JSONValue",
    # Components
    "IViewerConnection",
    "IConnectionRegistry",
    "ConnectionRegistry",
    "Channel",
    "SnapshotCapture",
    "VizServer",
    "IUrlLauncher",
    "BrowserLauncher",
    "INotebookEmbedder",
    "NotebookEmbedder",
    # Errors
    "GenVizError",
    "ChannelNotFoundError",
    "DeliveryError",
    "ProtocolError",
    "CaptureError",
    "CaptureTimeoutError",
]
