"""Visualization server: channel table and viewer protocol dispatch."""

import asyncio
import uuid
from pathlib import Path
from typing import AsyncIterable, Awaitable, Callable, TypeVar

from ..channel import Channel
from ..collaborators import (
    BrowserLauncher,
    INotebookEmbedder,
    IUrlLauncher,
    NotebookEmbedder,
)
from ..config import PathLike, Settings, resolve_asset_path
from ..errors import ChannelNotFoundError, GenVizError, ProtocolError
from ..logging_config import get_logger
from ..models import (
    Action,
    ChannelInfo,
    JSONValue,
    encode,
    initialize_message,
    parse_client_message,
)
from ..registry import IViewerConnection

logger = get_logger(__name__)

T = TypeVar("T")

_MAX_ID_ATTEMPTS = 8

# (channel id, viewer id) pairs registered through one socket
Bindings = set[tuple[str, str]]


class VizServer:
    """Owns the channel table and routes viewer messages to channels."""

    def __init__(
        self,
        settings: Settings | None = None,
        launcher: IUrlLauncher | None = None,
        embedder: INotebookEmbedder | None = None,
    ):
        self.settings = settings or Settings()
        self._launcher = launcher or BrowserLauncher()
        self._embedder = embedder or NotebookEmbedder()
        self._channels: dict[str, Channel] = {}
        self._lock = asyncio.Lock()

    @property
    def port(self) -> int:
        return self.settings.port

    # Channel table

    async def create_channel(self, asset_path: PathLike, info: JSONValue = None) -> Channel:
        """Create and register a new, empty channel.

        Raises:
            TypeError: ``info`` is not JSON-serializable.
        """
        encode(initialize_message({}, info))
        async with self._lock:
            for _ in range(_MAX_ID_ATTEMPTS):
                channel_id = str(uuid.uuid4())
                if channel_id not in self._channels:
                    break
            else:
                raise RuntimeError("Could not allocate a unique channel id")

            channel = Channel(
                channel_id,
                resolve_asset_path(asset_path),
                info=info,
                send_timeout=self.settings.send_timeout,
            )
            self._channels[channel_id] = channel

        logger.info(
            "Channel created",
            extra={"context": {"channel_id": channel_id, "asset_path": str(channel.asset_path)}},
        )
        return channel

    def find_channel(self, channel_id: str) -> Channel | None:
        return self._channels.get(channel_id)

    def get_channel(self, channel_id: str) -> Channel:
        """Look up a channel or raise ChannelNotFoundError."""
        channel = self._channels.get(channel_id)
        if channel is None:
            raise ChannelNotFoundError(channel_id)
        return channel

    async def remove_channel(self, channel_id: str) -> None:
        """Unregister a channel and disconnect its viewers."""
        async with self._lock:
            channel = self._channels.pop(channel_id, None)
        if channel is None:
            raise ChannelNotFoundError(channel_id)
        await channel.close()

    async def close(self) -> None:
        """Tear down every channel."""
        async with self._lock:
            channels = list(self._channels.values())
            self._channels.clear()
        for channel in channels:
            await channel.close()

    def describe(self, channel: Channel) -> ChannelInfo:
        return ChannelInfo(
            id=channel.id,
            url=self.viz_url(channel.id),
            asset_path=str(channel.asset_path),
            trace_ids=sorted(channel.traces),
            viewer_ids=sorted(channel.clients.viewer_ids),
            capture_state=channel.capture_state,
        )

    def list_channels(self) -> list[ChannelInfo]:
        return [self.describe(channel) for channel in list(self._channels.values())]

    def viz_url(self, channel_id: str) -> str:
        """URL at which viewers load the channel."""
        self.get_channel(channel_id)
        return f"http://{self.settings.public_host}:{self.settings.port}/{channel_id}/"

    # Viewer protocol

    async def serve_connection(
        self, connection: IViewerConnection, frames: AsyncIterable[str | bytes]
    ) -> None:
        """Dispatch every frame of one viewer socket until it closes."""
        bindings: Bindings = set()
        try:
            async for raw in frames:
                await self.handle_message(connection, raw, bindings)
        finally:
            await self.release_connection(connection, bindings)

    async def handle_message(
        self,
        connection: IViewerConnection,
        raw: str | bytes,
        bindings: Bindings | None = None,
    ) -> None:
        """Dispatch a single inbound frame. Never raises for bad input."""
        try:
            message = parse_client_message(raw)
        except ProtocolError as e:
            logger.warning("Dropping malformed frame: %s", e)
            return

        action = message.known_action
        if action is None:
            logger.debug("Ignoring unknown action %r", message.action)
            return

        channel = self._channels.get(message.viz_id)
        if channel is None or channel.closed:
            logger.debug(
                "Ignoring %s for unknown channel",
                action.value,
                extra={"context": {"channel_id": message.viz_id}},
            )
            return

        if action is Action.CONNECT:
            try:
                await channel.add_client(message.client_id, connection)
            except (GenVizError, RuntimeError, TypeError, ValueError) as e:
                logger.warning(
                    "Rejected connect: %s",
                    e,
                    extra={
                        "context": {"channel_id": channel.id, "viewer_id": message.client_id}
                    },
                )
                return
            if bindings is not None:
                bindings.add((channel.id, message.client_id))
        elif action is Action.DISCONNECT:
            await channel.remove_client(message.client_id)
            if bindings is not None:
                bindings.discard((channel.id, message.client_id))
        elif action is Action.SAVE:
            channel.receive_snapshot(
                message.client_id, message.content or "", message.request_id
            )

    async def release_connection(
        self, connection: IViewerConnection, bindings: Bindings
    ) -> None:
        """Drop registry entries still owned by a closed socket."""
        for channel_id, viewer_id in bindings:
            channel = self._channels.get(channel_id)
            if channel is not None:
                await channel.release(viewer_id, connection)
        bindings.clear()

    # Capture and export

    async def get_snapshot(self, channel_id: str) -> str:
        """Capture the rendered HTML of a channel from a live viewer."""
        channel = self.get_channel(channel_id)
        return await channel.get_snapshot(
            timeout=self.settings.capture_timeout,
            client_timeout=self.settings.client_wait_timeout,
        )

    async def save_to_file(self, channel_id: str, path: PathLike) -> Path:
        """Capture a channel and write the HTML to ``path``, overwriting it."""
        html = await self.get_snapshot(channel_id)
        target = Path(path)
        await asyncio.to_thread(target.write_text, html, encoding="utf-8")
        logger.info(
            "Snapshot saved",
            extra={"context": {"channel_id": channel_id, "path": str(target)}},
        )
        return target

    def open_in_browser(self, channel_id: str) -> None:
        self._launcher.launch(self.viz_url(channel_id))

    def open_in_notebook(self, channel_id: str, height: int = 600) -> None:
        self._embedder.show_frame(self.viz_url(channel_id), height)

    def freeze_in_notebook(self, html: str) -> None:
        """Replace the live inline frame with captured HTML."""
        self._embedder.show_html(html)

    async def display_in_notebook(
        self,
        channel_id: str,
        work: Callable[[], Awaitable[T]] | None = None,
        height: int = 600,
    ) -> T | None:
        """Show a channel inline, run ``work``, then freeze the display.

        Returns whatever ``work`` returned.
        """
        self.open_in_notebook(channel_id, height)
        result = await work() if work is not None else None
        await asyncio.sleep(self.settings.settle_delay)
        html = await self.get_snapshot(channel_id)
        self.freeze_in_notebook(html)
        return result
