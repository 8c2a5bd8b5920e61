"""Pytest configuration and fixtures."""

import socket
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fakes import APP_JS, INDEX_HTML  # noqa: E402


@pytest.fixture
def asset_dir(tmp_path):
    """Create a channel asset directory with index.html and a script."""
    assets = tmp_path / "assets"
    (assets / "js").mkdir(parents=True)
    (assets / "index.html").write_bytes(INDEX_HTML)
    (assets / "js" / "app.js").write_bytes(APP_JS)
    (tmp_path / "secret.txt").write_text("outside")
    return assets


@pytest.fixture
def settings():
    """Settings with short timeouts for tests."""
    from genviz.config import Settings

    return Settings(
        port=8123,
        send_timeout=0.2,
        capture_timeout=2.0,
        client_wait_timeout=None,
        settle_delay=0.0,
    )


@pytest.fixture
def launcher():
    """Mock URL launcher."""
    return Mock()


@pytest.fixture
def embedder():
    """Mock notebook embedder."""
    return Mock()


@pytest.fixture
def server(settings, launcher, embedder):
    """Create VizServer with mocked collaborators."""
    from genviz.server import VizServer

    return VizServer(settings, launcher=launcher, embedder=embedder)


@pytest_asyncio.fixture
async def channel(server, asset_dir):
    """Create a channel registered on the server."""
    ch = await server.create_channel(asset_dir, info={"title": "demo"})
    yield ch
    await server.close()


@pytest.fixture
def free_port():
    """Find a free TCP port on localhost."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]
