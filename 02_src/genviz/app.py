"""Application bootstrap and lifecycle management."""

import asyncio
from typing import Protocol

import uvicorn
from fastapi import FastAPI

from .api import create_fastapi_app
from .collaborators import INotebookEmbedder, IUrlLauncher
from .config import Settings
from .logging_config import get_logger
from .server import VizServer

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Start serving HTTP and viewer sockets."""
        ...

    async def stop(self) -> None:
        """Stop serving and tear down channels."""
        ...


class Application:
    """Runs a VizServer behind uvicorn on the current event loop."""

    def __init__(
        self,
        settings: Settings | None = None,
        launcher: IUrlLauncher | None = None,
        embedder: INotebookEmbedder | None = None,
    ):
        self._settings = settings or Settings.from_env()
        self._launcher = launcher
        self._embedder = embedder

        # Components (will be initialized in start())
        self._server: VizServer | None = None
        self._fastapi: FastAPI | None = None
        self._uvicorn: uvicorn.Server | None = None
        self._task: asyncio.Task | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        # 1. VizServer (channel table, no dependencies)
        self._server = VizServer(
            self._settings, launcher=self._launcher, embedder=self._embedder
        )

        # 2. FastAPI app (depends on VizServer)
        self._fastapi = create_fastapi_app(self._server)

        # 3. uvicorn listener (depends on FastAPI app)
        config = uvicorn.Config(
            app=self._fastapi,
            host=self._settings.host,
            port=self._settings.port,
            log_config=None,
            access_log=False,
        )
        self._uvicorn = uvicorn.Server(config)
        self._task = asyncio.create_task(self._uvicorn.serve())

        while not self._uvicorn.started:
            if self._task.done():
                # serve() exits early if the port cannot be bound
                self._task.result()
                raise RuntimeError(
                    f"Server failed to start on {self._settings.host}:{self._settings.port}"
                )
            await asyncio.sleep(0.05)

        logger.info(
            "Listening",
            extra={"context": {"host": self._settings.host, "port": self._settings.port}},
        )

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._uvicorn:
            self._uvicorn.should_exit = True
        if self._task:
            await self._task
            self._task = None
        if self._server:
            await self._server.close()
        logger.info("Application stopped")

    async def serve_forever(self) -> None:
        """Block until the listener exits (e.g. on SIGINT)."""
        if not self._task:
            raise RuntimeError("Application not started")
        await self._task

    @property
    def server(self) -> VizServer:
        """Get server instance."""
        if not self._server:
            raise RuntimeError("Application not started")
        return self._server

    @property
    def fastapi(self) -> FastAPI:
        """Get FastAPI app instance."""
        if not self._fastapi:
            raise RuntimeError("Application not started")
        return self._fastapi
