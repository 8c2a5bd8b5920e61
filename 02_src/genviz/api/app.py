"""FastAPI application setup."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from ..server import VizServer
from .routes import assets, observability, viewers


def create_fastapi_app(server: VizServer) -> FastAPI:
    """Create the HTTP + WebSocket application for one server."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Tear down channels on shutdown."""
        yield
        await server.close()

    fastapi_app = FastAPI(
        title="GenViz",
        description="Live-update visualization server",
        version="0.1.0",
        lifespan=lifespan,
    )
    fastapi_app.state.viz_server = server

    # /api routes first so they are not taken for channel ids
    fastapi_app.include_router(observability.create_observability_router(server))
    fastapi_app.include_router(assets.create_assets_router(server))
    fastapi_app.include_router(viewers.create_viewers_router(server))

    return fastapi_app
