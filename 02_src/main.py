"""Main entry point for the GenViz demo server."""

import asyncio
import os
from pathlib import Path

from dotenv import load_dotenv

from genviz import Application, Settings
from genviz.config import DEMO_ASSETS_DIR
from genviz.logging_config import get_logger, setup_logging
from sim import Sim

logger = get_logger(__name__)


async def run(settings: Settings, asset_dir: Path, open_browser: bool) -> None:
    """Serve one demo channel fed by the SIM until interrupted."""
    application = Application(settings)
    await application.start()

    server = application.server
    channel = await server.create_channel(asset_dir, info={"title": "GenViz demo"})
    logger.info("Demo channel at %s", server.viz_url(channel.id))

    sim = Sim(channel)
    await sim.start()
    if open_browser:
        server.open_in_browser(channel.id)

    try:
        await application.serve_forever()
    finally:
        await sim.stop()
        await application.stop()


def main():
    """Run the application."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")
    setup_logging()

    settings = Settings.from_env()
    asset_dir = Path(os.getenv("GENVIZ_DEMO_ASSETS", str(DEMO_ASSETS_DIR)))
    open_browser = os.getenv("GENVIZ_OPEN_BROWSER", "0") == "1"

    asyncio.run(run(settings, asset_dir, open_browser))


if __name__ == "__main__":
    main()
