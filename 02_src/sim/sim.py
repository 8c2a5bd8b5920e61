"""SIM implementation - random-walk traces for the demo channel."""

import asyncio
import random
from typing import Protocol

from genviz.channel import Channel
from genviz.logging_config import get_logger

logger = get_logger(__name__)


class ISim(Protocol):
    """Generate demo trace updates."""

    async def start(self) -> None:
        """Start feeding the channel."""
        ...

    async def stop(self) -> None:
        """Stop feeding."""
        ...


class Sim:
    """Keeps a few random-walk traces moving on a channel."""

    def __init__(
        self,
        channel: Channel,
        trace_count: int = 3,
        window: int = 40,
        interval: float = 0.5,
        seed: int | None = None,
    ):
        self._channel = channel
        self._trace_count = trace_count
        self._window = window
        self._interval = interval
        self._random = random.Random(seed)
        self._running = False
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        """Start the update loop."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run_scenario())

    async def stop(self) -> None:
        """Stop the update loop."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def step(self, series: dict[str, list[float]]) -> None:
        """Advance every trace by one sample and publish it."""
        for trace_id, values in series.items():
            last = values[-1] if values else 0.0
            values.append(round(last + self._random.uniform(-1, 1), 3))
            del values[: -self._window]
            await self._channel.put_trace(trace_id, {"y": list(values)})

    async def _run_scenario(self) -> None:
        """Publish updates until stopped."""
        series: dict[str, list[float]] = {
            f"walk-{i}": [] for i in range(self._trace_count)
        }
        logger.info(
            "SIM started",
            extra={"context": {"channel_id": self._channel.id, "traces": len(series)}},
        )
        try:
            while self._running:
                await self.step(series)
                await asyncio.sleep(self._interval)
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error("SIM scenario error: %s", e)
        finally:
            logger.info("SIM stopped", extra={"context": {"channel_id": self._channel.id}})
