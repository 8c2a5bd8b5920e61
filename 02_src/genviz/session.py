"""Synchronous facade for scripts and notebooks.

The application runs on its own event loop in a daemon thread; every call
below is submitted to that loop and waited on from the calling thread.

    session = VizSession()
    session.start()
    viz = session.create_channel("assets/scatter", info={"title": "demo"})
    viz.put_trace("a", {"y": [1, 2, 3]})
    viz.open_in_browser()
    viz.save_to_file("scatter.html")
"""

import asyncio
import threading
import time
from pathlib import Path
from typing import Any, Callable, Coroutine, TypeVar

from .app import Application
from .collaborators import INotebookEmbedder, IUrlLauncher
from .config import PathLike, Settings
from .logging_config import get_logger
from .models import JSONValue
from .server import VizServer

logger = get_logger(__name__)

T = TypeVar("T")


class VizSession:
    """Owns a background Application and exposes blocking calls."""

    def __init__(
        self,
        settings: Settings | None = None,
        launcher: IUrlLauncher | None = None,
        embedder: INotebookEmbedder | None = None,
    ):
        self._application = Application(settings, launcher=launcher, embedder=embedder)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._ready = threading.Event()
        self._startup_error: BaseException | None = None

    @property
    def server(self) -> VizServer:
        return self._application.server

    def start(self, timeout: float = 10.0) -> None:
        """Start the server thread and wait until it is listening."""
        if self._thread and self._thread.is_alive():
            return

        def _run() -> None:
            self._loop = asyncio.new_event_loop()
            asyncio.set_event_loop(self._loop)
            try:
                self._loop.run_until_complete(self._application.start())
            except Exception as e:
                self._startup_error = e
                self._ready.set()
                return
            self._ready.set()
            self._loop.run_forever()

        self._thread = threading.Thread(target=_run, name="genviz-server", daemon=True)
        self._thread.start()
        if not self._ready.wait(timeout):
            raise RuntimeError("Server did not start in time")
        if self._startup_error is not None:
            raise RuntimeError("Server failed to start") from self._startup_error

    def stop(self) -> None:
        """Stop the server and join the thread."""
        if not self._loop or not self._thread:
            return
        self.run(self._application.stop())
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)
        self._thread = None
        self._loop = None

    def run(self, coro: Coroutine[Any, Any, T], timeout: float | None = None) -> T:
        """Run a coroutine on the server loop and wait for its result."""
        if self._loop is None:
            coro.close()
            raise RuntimeError("Application not started")
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result(timeout)

    def create_channel(self, asset_path: PathLike, info: JSONValue = None) -> "ChannelHandle":
        channel = self.run(self.server.create_channel(asset_path, info))
        return ChannelHandle(self, channel.id)

    def channel(self, channel_id: str) -> "ChannelHandle":
        """Handle for an existing channel."""
        self.server.get_channel(channel_id)
        return ChannelHandle(self, channel_id)

    def __enter__(self) -> "VizSession":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


class ChannelHandle:
    """Blocking operations on one channel of a VizSession."""

    def __init__(self, session: VizSession, channel_id: str):
        self._session = session
        self.id = channel_id

    def __repr__(self) -> str:
        return f"ChannelHandle({self.id!r})"

    @property
    def _server(self) -> VizServer:
        return self._session.server

    @property
    def traces(self) -> dict[str, JSONValue]:
        """Copy of the current trace mapping, taken on the server loop."""
        channel = self._server.get_channel(self.id)

        async def _copy() -> dict[str, JSONValue]:
            return dict(channel.traces)

        return self._session.run(_copy())

    def url(self) -> str:
        return self._server.viz_url(self.id)

    def put_trace(self, trace_id: str, trace: JSONValue) -> None:
        channel = self._server.get_channel(self.id)
        self._session.run(channel.put_trace(trace_id, trace))

    def delete_trace(self, trace_id: str) -> None:
        channel = self._server.get_channel(self.id)
        self._session.run(channel.delete_trace(trace_id))

    def get_snapshot(self) -> str:
        return self._session.run(self._server.get_snapshot(self.id))

    def save_to_file(self, path: PathLike) -> Path:
        return self._session.run(self._server.save_to_file(self.id, path))

    def open_in_browser(self) -> None:
        self._server.open_in_browser(self.id)

    def open_in_notebook(self, height: int = 600) -> None:
        self._server.open_in_notebook(self.id, height)

    def display_in_notebook(
        self, work: Callable[[], T] | None = None, height: int = 600
    ) -> T | None:
        """Show the channel inline, run ``work``, then freeze the display.

        ``work`` runs on the calling thread, so it can use this handle.
        Returns whatever ``work`` returned.
        """
        self.open_in_notebook(height)
        result = work() if work is not None else None
        time.sleep(self._server.settings.settle_delay)
        html = self.get_snapshot()
        self._server.freeze_in_notebook(html)
        return result

    def close(self) -> None:
        """Remove the channel from the server."""
        self._session.run(self._server.remove_channel(self.id))
