"""Per-channel registry of connected viewers."""

import asyncio
from typing import Protocol

from .connection import IViewerConnection


class IConnectionRegistry(Protocol):
    """Viewer-id -> connection mapping, safe under concurrent mutation."""

    def __len__(self) -> int:
        ...

    @property
    def closed(self) -> bool:
        """Whether the owning channel has been torn down."""
        ...

    @property
    def viewer_ids(self) -> list[str]:
        ...

    def get(self, viewer_id: str) -> IViewerConnection | None:
        """Connection currently bound to ``viewer_id``."""
        ...

    async def add(self, viewer_id: str, connection: IViewerConnection) -> None:
        """Register a connection, replacing any previous one for the id."""
        ...

    async def remove(self, viewer_id: str) -> bool:
        """Remove a viewer. Returns False if it was not registered."""
        ...

    async def discard(self, viewer_id: str, connection: IViewerConnection) -> bool:
        """Remove a viewer only if it is still bound to ``connection``."""
        ...

    async def snapshot(self) -> list[tuple[str, IViewerConnection]]:
        """Stable copy of the current membership."""
        ...

    async def wait_for_viewer(self, timeout: float | None = None) -> None:
        """Block until at least one viewer is registered."""
        ...

    async def close(self) -> None:
        """Drop every viewer and wake anyone waiting for one."""
        ...


class ConnectionRegistry:
    """Tracks which viewer ids map to which live connections."""

    def __init__(self):
        self._clients: dict[str, IViewerConnection] = {}
        self._lock = asyncio.Lock()
        self._joined = asyncio.Condition(self._lock)
        self._closed = False

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, viewer_id: object) -> bool:
        return viewer_id in self._clients

    @property
    def viewer_ids(self) -> list[str]:
        return list(self._clients)

    def get(self, viewer_id: str) -> IViewerConnection | None:
        return self._clients.get(viewer_id)

    async def add(self, viewer_id: str, connection: IViewerConnection) -> None:
        """Register a connection, replacing any previous one for the id."""
        async with self._joined:
            if self._closed:
                raise RuntimeError("Registry is closed")
            self._clients[viewer_id] = connection
            self._joined.notify_all()

    async def remove(self, viewer_id: str) -> bool:
        """Remove a viewer. Returns False if it was not registered."""
        async with self._lock:
            return self._clients.pop(viewer_id, None) is not None

    async def discard(self, viewer_id: str, connection: IViewerConnection) -> bool:
        """Remove a viewer only if it is still bound to ``connection``."""
        async with self._lock:
            if self._clients.get(viewer_id) is not connection:
                return False
            del self._clients[viewer_id]
            return True

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        """Drop every viewer and wake anyone waiting for one."""
        async with self._joined:
            self._closed = True
            self._clients.clear()
            self._joined.notify_all()

    async def snapshot(self) -> list[tuple[str, IViewerConnection]]:
        """Stable copy of the current membership."""
        async with self._lock:
            return list(self._clients.items())

    async def wait_for_viewer(self, timeout: float | None = None) -> None:
        """Block until at least one viewer is registered or the registry closes.

        Raises:
            asyncio.TimeoutError: ``timeout`` elapsed with no viewer.
        """
        async with self._joined:
            await asyncio.wait_for(
                self._joined.wait_for(lambda: bool(self._clients) or self._closed), timeout
            )
