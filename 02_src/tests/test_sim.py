"""Tests for the demo SIM."""

import asyncio

import pytest

from fakes import FakeConnection, wait_until
from sim import Sim


class TestSimStep:
    """Tests for Sim.step()."""

    @pytest.mark.asyncio
    async def test_step_publishes_traces(self, channel):
        """Test that one step puts every trace on the channel."""
        conn = FakeConnection()
        await channel.add_client("v1", conn)
        sim = Sim(channel, seed=1)

        series = {"walk-0": [], "walk-1": []}
        await sim.step(series)

        assert set(channel.traces) == {"walk-0", "walk-1"}
        assert all(len(t["y"]) == 1 for t in channel.traces.values())
        assert conn.actions() == ["initialize", "putTrace", "putTrace"]

    @pytest.mark.asyncio
    async def test_window_bounds_history(self, channel):
        """Test that traces keep at most `window` samples."""
        sim = Sim(channel, window=5, seed=2)
        series = {"walk-0": []}
        for _ in range(12):
            await sim.step(series)

        assert len(channel.traces["walk-0"]["y"]) == 5


class TestSimLifecycle:
    """Tests for Sim start/stop."""

    @pytest.mark.asyncio
    async def test_start_and_stop(self, channel):
        """Test that the background loop updates the channel until stopped."""
        sim = Sim(channel, trace_count=2, interval=0.01, seed=3)
        await sim.start()
        await wait_until(lambda: len(channel.traces) == 2)
        await sim.stop()

        snapshot = {k: list(v["y"]) for k, v in channel.traces.items()}
        await asyncio.sleep(0.05)
        assert {k: v["y"] for k, v in channel.traces.items()} == snapshot
