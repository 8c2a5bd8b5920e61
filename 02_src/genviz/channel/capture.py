"""Snapshot capture handshake for a single channel."""

import asyncio
import uuid
from typing import Awaitable, Callable

from ..errors import CaptureError, CaptureTimeoutError
from ..logging_config import get_channel_logger
from ..models import CaptureState
from ..registry import IConnectionRegistry

RequestBroadcaster = Callable[[str], Awaitable[int]]


class SnapshotCapture:
    """Request/response state machine retrieving a viewer's rendered output.

    Requests are serialized: a second ``capture()`` waits until the first one
    finishes. Each request carries a fresh id, so a ``save`` tagged with a
    stale id never resolves a newer request.
    """

    def __init__(self, channel_id: str, registry: IConnectionRegistry):
        self._registry = registry
        self._queue = asyncio.Lock()
        self._pending_id: str | None = None
        self._pending: asyncio.Future[str] | None = None
        self._state = CaptureState.IDLE
        self.latest: str = ""
        self._logger = get_channel_logger(__name__, channel_id)

    @property
    def state(self) -> CaptureState:
        return self._state

    async def capture(
        self,
        request: RequestBroadcaster,
        timeout: float | None = None,
        client_timeout: float | None = None,
    ) -> str:
        """Capture rendered content from the first viewer to answer.

        Args:
            request: Broadcasts the capture request for a given request id.
            timeout: Bound on waiting for the response (None = forever).
            client_timeout: Bound on waiting for a first viewer (None = forever).

        Raises:
            CaptureTimeoutError: no viewer joined or answered in time.
            CaptureError: the channel was closed while waiting.
        """
        async with self._queue:
            try:
                request_id, future = await self._request(request, client_timeout)

                try:
                    content = await asyncio.wait_for(future, timeout)
                except asyncio.TimeoutError as e:
                    raise CaptureTimeoutError(
                        f"No snapshot received within {timeout} seconds"
                    ) from e

                self._state = CaptureState.CAPTURED
                self._logger.info(
                    "Capture completed",
                    extra={"context": {"request_id": request_id, "size": len(content)}},
                )
                return content
            finally:
                self._pending_id = None
                self._pending = None
                self._state = CaptureState.IDLE

    async def _request(
        self, request: RequestBroadcaster, client_timeout: float | None
    ) -> tuple[str, "asyncio.Future[str]"]:
        """Broadcast a tagged request until at least one viewer receives it.

        Viewers evicted during the broadcast may leave nobody to answer; in
        that case wait for the next viewer and ask again.
        """
        while True:
            if len(self._registry) == 0:
                self._state = CaptureState.AWAITING_CLIENT
                self._logger.warning(
                    "Capture requested for a visualization that is not yet open; "
                    "waiting for a viewer"
                )
            try:
                await self._registry.wait_for_viewer(client_timeout)
            except asyncio.TimeoutError as e:
                raise CaptureTimeoutError("No viewer connected in time") from e
            if self._registry.closed:
                raise CaptureError("Channel closed before a viewer connected")

            request_id = uuid.uuid4().hex
            future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
            self._pending_id = request_id
            self._pending = future
            self._state = CaptureState.REQUESTED

            delivered = await request(request_id)
            if delivered or future.done():
                self._logger.info(
                    "Capture requested",
                    extra={"context": {"request_id": request_id, "viewers": delivered}},
                )
                return request_id, future

            self._logger.warning(
                "Capture request reached no viewer; retrying",
                extra={"context": {"request_id": request_id}},
            )
            self._pending_id = None
            self._pending = None

    def receive(self, viewer_id: str, content: str, request_id: str | None = None) -> bool:
        """Record a ``save`` from a viewer.

        The content always becomes the latest snapshot. Returns True if it
        completed the pending request.
        """
        self.latest = content
        future = self._pending
        if future is None or future.done():
            self._logger.debug(
                "Snapshot received with no pending request",
                extra={"context": {"viewer_id": viewer_id}},
            )
            return False
        if request_id is not None and request_id != self._pending_id:
            self._logger.debug(
                "Snapshot for a stale request",
                extra={"context": {"viewer_id": viewer_id, "request_id": request_id}},
            )
            return False
        future.set_result(content)
        return True

    def cancel(self, reason: str) -> None:
        """Fail the pending request, if any."""
        if self._pending is not None and not self._pending.done():
            self._pending.set_exception(CaptureError(reason))
