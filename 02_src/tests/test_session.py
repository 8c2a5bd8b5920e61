"""Tests for the synchronous VizSession facade."""

import json
import threading
from unittest.mock import Mock

import pytest

from fakes import FakeConnection, wait_until_sync
from genviz.config import Settings
from genviz.errors import ChannelNotFoundError
from genviz.session import VizSession


@pytest.fixture
def session(free_port):
    """Start a session on a free port."""
    s = VizSession(
        Settings(port=free_port, settle_delay=0.0, capture_timeout=5.0),
        launcher=Mock(),
        embedder=Mock(),
    )
    s.start()
    yield s
    s.stop()


def answer_capture(session, channel_id, conn, content):
    """Reply to the next capture request from a helper thread."""

    def _answer():
        wait_until_sync(lambda: "saveHTML" in conn.actions())
        raw = json.dumps(
            {
                "action": "save",
                "clientId": "v1",
                "vizId": channel_id,
                "content": content,
                "requestId": conn.last("saveHTML")["requestId"],
            }
        )
        session.run(session.server.handle_message(conn, raw))

    thread = threading.Thread(target=_answer, daemon=True)
    thread.start()
    return thread


class TestVizSessionLifecycle:
    """Tests for start/stop."""

    def test_run_before_start(self):
        """Test that submitting work before start raises."""
        session = VizSession(Settings())

        async def noop():
            return None

        with pytest.raises(RuntimeError, match="not started"):
            session.run(noop())

    def test_server_before_start(self):
        """Test that the server is unavailable before start."""
        with pytest.raises(RuntimeError, match="not started"):
            _ = VizSession(Settings()).server

    def test_context_manager(self, free_port, asset_dir):
        """Test that the session starts and stops as a context manager."""
        with VizSession(Settings(port=free_port)) as session:
            viz = session.create_channel(asset_dir)
            assert viz.url() == f"http://127.0.0.1:{free_port}/{viz.id}/"


class TestChannelHandle:
    """Tests for blocking channel operations."""

    def test_put_and_delete_trace(self, session, asset_dir):
        """Test that trace updates reach a connected viewer."""
        viz = session.create_channel(asset_dir, info={"title": "demo"})
        conn = FakeConnection()
        channel = session.server.get_channel(viz.id)
        session.run(channel.add_client("v1", conn))

        viz.put_trace("a", {"y": [1, 2, 3]})
        viz.put_trace("b", {"y": [4, 5]})
        viz.delete_trace("a")

        assert viz.traces == {"b": {"y": [4, 5]}}
        assert conn.actions() == ["initialize", "putTrace", "putTrace", "removeTrace"]

    def test_save_to_file(self, session, asset_dir, tmp_path):
        """Test capture across threads and write to disk."""
        viz = session.create_channel(asset_dir)
        conn = FakeConnection()
        session.run(session.server.get_channel(viz.id).add_client("v1", conn))

        helper = answer_capture(session, viz.id, conn, "<html>saved</html>")
        path = viz.save_to_file(tmp_path / "out.html")
        helper.join(timeout=5)

        assert path.read_text(encoding="utf-8") == "<html>saved</html>"

    def test_display_in_notebook(self, session, asset_dir):
        """Test that work runs, the display freezes and the result returns."""
        viz = session.create_channel(asset_dir)
        conn = FakeConnection()
        session.run(session.server.get_channel(viz.id).add_client("v1", conn))
        embedder = session.server._embedder

        def work():
            viz.put_trace("t", [1])
            return 7

        helper = answer_capture(session, viz.id, conn, "<html>frozen</html>")
        assert viz.display_in_notebook(work, height=300) == 7
        helper.join(timeout=5)

        embedder.show_frame.assert_called_once_with(viz.url(), 300)
        embedder.show_html.assert_called_once_with("<html>frozen</html>")

    def test_open_in_browser(self, session, asset_dir):
        """Test that the launcher gets the viewer URL."""
        viz = session.create_channel(asset_dir)
        viz.open_in_browser()
        session.server._launcher.launch.assert_called_once_with(viz.url())

    def test_close_channel(self, session, asset_dir):
        """Test that closed channels reject further calls."""
        viz = session.create_channel(asset_dir)
        viz.close()

        with pytest.raises(ChannelNotFoundError):
            viz.put_trace("a", 1)
        with pytest.raises(ChannelNotFoundError):
            session.channel(viz.id)
