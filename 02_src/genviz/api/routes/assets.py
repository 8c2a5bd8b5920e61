"""Static asset routes: serve each channel's directory."""

from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from ...errors import ChannelNotFoundError
from ...server import VizServer

INDEX_FILE = "index.html"


def resolve_asset(asset_dir: Path, rel_path: str) -> Path | None:
    """Map a request path onto a file inside ``asset_dir``.

    Returns None when the file does not exist or escapes the directory.
    """
    root = asset_dir.resolve()
    candidate = (root / (rel_path or INDEX_FILE)).resolve()
    if candidate != root and root not in candidate.parents:
        return None
    return candidate if candidate.is_file() else None


def create_assets_router(server: VizServer) -> APIRouter:
    """Create the per-channel static file router."""
    router = APIRouter(tags=["assets"])

    def serve(channel_id: str, rel_path: str) -> FileResponse:
        try:
            channel = server.get_channel(channel_id)
        except ChannelNotFoundError:
            raise HTTPException(status_code=404, detail="Unknown visualization")

        file = resolve_asset(channel.asset_path, rel_path)
        if file is None:
            raise HTTPException(status_code=404, detail="File not found")
        return FileResponse(file)

    @router.get("/{channel_id}/")
    async def get_index(channel_id: str) -> FileResponse:
        """Serve the channel's index.html."""
        return serve(channel_id, "")

    @router.get("/{channel_id}/{rel_path:path}")
    async def get_asset(channel_id: str, rel_path: str) -> FileResponse:
        """Serve a file from the channel's asset directory."""
        return serve(channel_id, rel_path)

    return router
