"""WebSocket route carrying the viewer protocol."""

from fastapi import APIRouter, WebSocket

from ...logging_config import get_logger
from ...server import VizServer
from ..connection import WebSocketConnection

logger = get_logger(__name__)


def create_viewers_router(server: VizServer) -> APIRouter:
    """Accept viewer sockets on any path of the port."""
    router = APIRouter(tags=["viewers"])

    @router.websocket("/{path:path}")
    async def viewer_socket(websocket: WebSocket, path: str) -> None:
        await websocket.accept()
        connection = WebSocketConnection(websocket)
        logger.debug("Viewer socket opened on /%s", path)
        await server.serve_connection(connection, connection.frames())
        logger.debug("Viewer socket closed on /%s", path)

    return router
