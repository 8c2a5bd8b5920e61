"""Tests for ConnectionRegistry."""

import asyncio

import pytest

from fakes import FakeConnection
from genviz.registry import ConnectionRegistry


class TestRegistryMembership:
    """Tests for add/remove/discard."""

    @pytest.mark.asyncio
    async def test_add(self):
        """Test registering a viewer."""
        registry = ConnectionRegistry()
        conn = FakeConnection()
        await registry.add("v1", conn)

        assert len(registry) == 1
        assert "v1" in registry
        assert registry.get("v1") is conn

    @pytest.mark.asyncio
    async def test_add_overwrites_same_id(self):
        """Test that a second connection under the same id replaces the first."""
        registry = ConnectionRegistry()
        old, new = FakeConnection(), FakeConnection()
        await registry.add("v1", old)
        await registry.add("v1", new)

        assert len(registry) == 1
        assert registry.get("v1") is new

    @pytest.mark.asyncio
    async def test_remove_is_idempotent(self):
        """Test removing twice and removing unknown ids."""
        registry = ConnectionRegistry()
        await registry.add("v1", FakeConnection())
        await registry.add("v2", FakeConnection())

        assert await registry.remove("v1") is True
        assert await registry.remove("v1") is False
        assert await registry.remove("never-added") is False
        assert registry.viewer_ids == ["v2"]

    @pytest.mark.asyncio
    async def test_discard_only_matching_connection(self):
        """Test that discard leaves a newer connection for the same id alone."""
        registry = ConnectionRegistry()
        stale, fresh = FakeConnection(), FakeConnection()
        await registry.add("v1", stale)
        await registry.add("v1", fresh)

        assert await registry.discard("v1", stale) is False
        assert registry.get("v1") is fresh
        assert await registry.discard("v1", fresh) is True
        assert "v1" not in registry

    @pytest.mark.asyncio
    async def test_snapshot_is_stable(self):
        """Test that later mutations do not change an earlier snapshot."""
        registry = ConnectionRegistry()
        await registry.add("v1", FakeConnection())
        members = await registry.snapshot()

        await registry.add("v2", FakeConnection())
        await registry.remove("v1")

        assert [viewer_id for viewer_id, _ in members] == ["v1"]


class TestRegistryWaiting:
    """Tests for wait_for_viewer and close."""

    @pytest.mark.asyncio
    async def test_wait_returns_immediately_with_viewer(self):
        """Test waiting when a viewer is already present."""
        registry = ConnectionRegistry()
        await registry.add("v1", FakeConnection())
        await registry.wait_for_viewer(timeout=0.1)

    @pytest.mark.asyncio
    async def test_wait_wakes_on_add(self):
        """Test that adding a viewer wakes a waiter."""
        registry = ConnectionRegistry()
        waiter = asyncio.create_task(registry.wait_for_viewer())
        await asyncio.sleep(0.05)
        assert not waiter.done()

        await registry.add("v1", FakeConnection())
        await asyncio.wait_for(waiter, 1.0)

    @pytest.mark.asyncio
    async def test_wait_timeout(self):
        """Test that waiting with no viewers times out."""
        registry = ConnectionRegistry()
        with pytest.raises(asyncio.TimeoutError):
            await registry.wait_for_viewer(timeout=0.05)

    @pytest.mark.asyncio
    async def test_close_wakes_waiter(self):
        """Test that closing wakes waiters and empties the registry."""
        registry = ConnectionRegistry()
        waiter = asyncio.create_task(registry.wait_for_viewer())
        await asyncio.sleep(0.05)

        await registry.close()
        await asyncio.wait_for(waiter, 1.0)
        assert registry.closed
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_add_after_close_raises(self):
        """Test that a closed registry rejects new viewers."""
        registry = ConnectionRegistry()
        await registry.close()
        with pytest.raises(RuntimeError, match="closed"):
            await registry.add("v1", FakeConnection())
