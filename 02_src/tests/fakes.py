"""Test doubles shared across test modules."""

import asyncio
import json
import time
from typing import Callable

INDEX_HTML = b"<!DOCTYPE html><html><body><div id='plot'></div></body></html>\n"
APP_JS = b"console.log('viewer');\n"


class FakeConnection:
    """In-memory viewer connection that records every frame sent to it."""

    def __init__(self, fail: bool = False, delay: float = 0.0):
        self.sent: list[dict] = []
        self.is_open = True
        self.fail = fail
        self.delay = delay

    async def send_text(self, data: str) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise ConnectionError("broken pipe")
        self.sent.append(json.loads(data))

    def actions(self) -> list[str]:
        return [m["action"] for m in self.sent]

    def last(self, action: str) -> dict:
        return [m for m in self.sent if m["action"] == action][-1]


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll ``predicate`` on the running loop until it holds."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


def wait_until_sync(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    """Thread-blocking variant of ``wait_until``."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met in time")
        time.sleep(0.01)


def frame(**fields) -> str:
    """Encode an inbound control frame."""
    return json.dumps(fields)
