"""Observability API routes."""

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException

from ...errors import ChannelNotFoundError
from ...models import CaptureState, ChannelInfo
from ...server import VizServer


class ChannelResponse(BaseModel):
    """Response model for a channel summary."""

    id: str
    url: str
    asset_path: str
    trace_ids: list[str]
    viewer_ids: list[str]
    capture_state: CaptureState


class HealthResponse(BaseModel):
    """Response model for health checks."""

    status: str


def _to_response(info: ChannelInfo) -> dict:
    return {
        "id": info.id,
        "url": info.url,
        "asset_path": info.asset_path,
        "trace_ids": info.trace_ids,
        "viewer_ids": info.viewer_ids,
        "capture_state": info.capture_state,
    }


def create_observability_router(server: VizServer) -> APIRouter:
    """Create observability router."""
    router = APIRouter(prefix="/api", tags=["observability"])

    @router.get("/health", response_model=HealthResponse)
    async def health() -> dict:
        return {"status": "ok"}

    @router.get("/channels", response_model=list[ChannelResponse])
    async def list_channels() -> list[dict]:
        """List every live channel."""
        return [_to_response(info) for info in server.list_channels()]

    @router.get("/channels/{channel_id}", response_model=ChannelResponse)
    async def get_channel(channel_id: str) -> dict:
        """Describe one channel."""
        try:
            channel = server.get_channel(channel_id)
        except ChannelNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return _to_response(server.describe(channel))

    return router
