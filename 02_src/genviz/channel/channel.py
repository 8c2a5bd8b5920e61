"""Visualization channel: trace state, viewers and broadcast."""

import asyncio
from pathlib import Path
from typing import Any

from ..errors import DeliveryError
from ..logging_config import get_channel_logger
from ..models import (
    CaptureState,
    JSONValue,
    encode,
    initialize_message,
    put_trace_message,
    remove_trace_message,
    save_snapshot_message,
)
from ..registry import ConnectionRegistry, IConnectionRegistry, IViewerConnection
from .capture import SnapshotCapture


class Channel:
    """One visualization session, mirrored to every connected viewer.

    ``traces`` is only changed through ``put_trace``/``delete_trace``. Trace
    mutation, message composition and delivery happen under one lock, so
    each viewer sees messages in the order the channel issued them and an
    ``initialize`` always reflects every delta sent before it.
    """

    def __init__(
        self,
        channel_id: str,
        asset_path: Path,
        info: JSONValue = None,
        send_timeout: float = 2.0,
        registry: IConnectionRegistry | None = None,
    ):
        self.id = channel_id
        self.asset_path = asset_path
        self.info = info
        self.traces: dict[str, JSONValue] = {}
        self.clients = registry if registry is not None else ConnectionRegistry()
        self._send_timeout = send_timeout
        self._state_lock = asyncio.Lock()
        self._capture = SnapshotCapture(channel_id, self.clients)
        self._logger = get_channel_logger(__name__, channel_id)

    @property
    def latest_snapshot(self) -> str:
        return self._capture.latest

    @property
    def capture_state(self) -> CaptureState:
        return self._capture.state

    @property
    def closed(self) -> bool:
        return self.clients.closed

    # Viewers

    async def add_client(self, viewer_id: str, connection: IViewerConnection) -> None:
        """Register a viewer and send it the full current state."""
        async with self._state_lock:
            message = encode(initialize_message(dict(self.traces), self.info))
            await self.clients.add(viewer_id, connection)
            delivered = await self._deliver(viewer_id, connection, message)
        if delivered:
            self._logger.info(
                "Viewer joined",
                extra={"context": {"viewer_id": viewer_id, "viewers": len(self.clients)}},
            )

    async def remove_client(self, viewer_id: str) -> None:
        """Unregister a viewer. Unknown ids are ignored."""
        if await self.clients.remove(viewer_id):
            self._logger.info(
                "Viewer left",
                extra={"context": {"viewer_id": viewer_id, "viewers": len(self.clients)}},
            )

    async def release(self, viewer_id: str, connection: IViewerConnection) -> None:
        """Unregister a viewer if it is still bound to ``connection``."""
        if await self.clients.discard(viewer_id, connection):
            self._logger.info(
                "Viewer connection closed",
                extra={"context": {"viewer_id": viewer_id}},
            )

    # Traces

    async def put_trace(self, trace_id: str, trace: JSONValue) -> None:
        """Insert or replace a trace and push it to every viewer.

        Raises:
            TypeError: ``trace`` is not JSON-serializable. The trace map is
                left unchanged.
        """
        data = encode(put_trace_message(trace_id, trace))
        async with self._state_lock:
            self.traces[trace_id] = trace
            await self._broadcast_locked(data)

    async def delete_trace(self, trace_id: str) -> None:
        """Remove a trace (if present) and tell every viewer."""
        async with self._state_lock:
            self.traces.pop(trace_id, None)
            await self._broadcast_locked(encode(remove_trace_message(trace_id)))

    # Broadcast

    async def broadcast(self, message: dict[str, Any]) -> int:
        """Best-effort send to all viewers. Returns the number reached."""
        data = encode(message)
        async with self._state_lock:
            return await self._broadcast_locked(data)

    async def _broadcast_locked(self, data: str) -> int:
        members = await self.clients.snapshot()
        if not members:
            return 0

        results = await asyncio.gather(
            *[
                self._deliver(viewer_id, connection, data)
                for viewer_id, connection in members
                if self.clients.get(viewer_id) is connection
            ],
            return_exceptions=True,
        )
        return sum(1 for result in results if result is True)

    async def _deliver(
        self, viewer_id: str, connection: IViewerConnection, data: str
    ) -> bool:
        """Send one frame to one viewer; evict it on failure."""
        try:
            if not connection.is_open:
                raise DeliveryError(viewer_id, "connection closed")
            try:
                await asyncio.wait_for(connection.send_text(data), self._send_timeout)
            except asyncio.TimeoutError as e:
                raise DeliveryError(viewer_id, "send timed out") from e
            except Exception as e:
                raise DeliveryError(viewer_id, str(e) or type(e).__name__) from e
        except DeliveryError as e:
            self._logger.warning(str(e), extra={"context": {"viewer_id": viewer_id}})
            await self.clients.discard(viewer_id, connection)
            return False
        return True

    # Snapshot capture

    async def get_snapshot(
        self,
        timeout: float | None = None,
        client_timeout: float | None = None,
    ) -> str:
        """Capture the rendered output of one live viewer.

        Blocks until a viewer is connected, then until the first one
        answers the capture request.
        """
        return await self._capture.capture(
            lambda request_id: self.broadcast(save_snapshot_message(request_id)),
            timeout=timeout,
            client_timeout=client_timeout,
        )

    def receive_snapshot(
        self, viewer_id: str, content: str, request_id: str | None = None
    ) -> bool:
        """Feed a viewer's ``save`` into the capture handshake."""
        return self._capture.receive(viewer_id, content, request_id)

    async def close(self) -> None:
        """Tear down: drop viewers and fail any pending capture."""
        self._capture.cancel(f"Channel {self.id} was closed")
        await self.clients.close()
        self._logger.info("Channel closed")
