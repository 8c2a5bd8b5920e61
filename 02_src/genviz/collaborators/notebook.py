"""Inline display of channels inside a Jupyter notebook."""

from typing import Protocol


class INotebookEmbedder(Protocol):
    """Displays a live frame, then replaces it with frozen HTML."""

    def show_frame(self, url: str, height: int) -> None:
        """Display an inline frame pointing at ``url``."""
        ...

    def show_html(self, html: str) -> None:
        """Replace the previous inline display with ``html``."""
        ...


def iframe_html(url: str, height: int) -> str:
    return (
        f'<iframe src="{url}" frameBorder="0" width="100%" height="{height}"></iframe>'
    )


class NotebookEmbedder:
    """IPython-backed embedder (requires the ``notebook`` extra)."""

    def show_frame(self, url: str, height: int) -> None:
        from IPython.display import HTML, display

        display(HTML(iframe_html(url, height)))

    def show_html(self, html: str) -> None:
        from IPython.display import HTML, clear_output, display

        clear_output(wait=True)
        display(HTML(html))
