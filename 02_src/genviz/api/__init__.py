"""HTTP and WebSocket API."""

from .app import create_fastapi_app
from .connection import WebSocketConnection

__all__ = ["WebSocketConnection", "create_fastapi_app"]
