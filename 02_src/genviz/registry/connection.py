"""Viewer connection abstraction."""

from typing import Protocol


class IViewerConnection(Protocol):
    """A live, bidirectional message channel to one viewer."""

    @property
    def is_open(self) -> bool:
        """Whether the connection can still be written to."""
        ...

    async def send_text(self, data: str) -> None:
        """Write one text frame. Raises on a closed or broken connection."""
        ...
