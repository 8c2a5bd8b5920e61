"""External collaborators: browser launcher and notebook embedder."""

from .launcher import BrowserLauncher, IUrlLauncher
from .notebook import INotebookEmbedder, NotebookEmbedder, iframe_html

__all__ = [
    "BrowserLauncher",
    "IUrlLauncher",
    "INotebookEmbedder",
    "NotebookEmbedder",
    "iframe_html",
]
