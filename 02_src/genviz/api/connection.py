"""Adapts a Starlette WebSocket to the viewer connection interface."""

from typing import AsyncIterator

from fastapi import WebSocket
from starlette.websockets import WebSocketState


class WebSocketConnection:
    """A viewer connection backed by an accepted WebSocket."""

    def __init__(self, websocket: WebSocket):
        self._websocket = websocket

    @property
    def is_open(self) -> bool:
        return (
            self._websocket.client_state == WebSocketState.CONNECTED
            and self._websocket.application_state == WebSocketState.CONNECTED
        )

    async def send_text(self, data: str) -> None:
        await self._websocket.send_text(data)

    async def frames(self) -> AsyncIterator[str | bytes]:
        """Yield text or binary frames until the peer disconnects."""
        while True:
            message = await self._websocket.receive()
            if message["type"] == "websocket.disconnect":
                return
            text = message.get("text")
            if text is not None:
                yield text
            elif message.get("bytes") is not None:
                yield message["bytes"]
