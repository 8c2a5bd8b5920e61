"""Opens viewer URLs in a local browser."""

import webbrowser
from typing import Protocol

from ..logging_config import get_logger

logger = get_logger(__name__)


class IUrlLauncher(Protocol):
    """Fire-and-forget URL opener."""

    def launch(self, url: str) -> None:
        ...


class BrowserLauncher:
    """Launches URLs with the platform's default browser."""

    def launch(self, url: str) -> None:
        if not webbrowser.open(url):
            logger.warning("No browser available to open %s", url)
