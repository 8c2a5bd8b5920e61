"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"
DEMO_ASSETS_DIR = Path(__file__).resolve().parent / "static" / "demo"


PathLike = Union[str, Path]


def _optional_float(value: str | None, default: float | None) -> float | None:
    """Parse a float env value; "none" or "" means unbounded."""
    if value is None:
        return default
    if value.strip().lower() in ("", "none"):
        return None
    return float(value)


@dataclass
class Settings:
    """Runtime settings for the visualization server."""

    host: str = "127.0.0.1"
    port: int = 8000
    public_host: str = "127.0.0.1"  # host used in viewer URLs
    send_timeout: float = 2.0  # per-viewer delivery bound
    capture_timeout: float | None = 30.0
    client_wait_timeout: float | None = None
    settle_delay: float = 1.0

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from GENVIZ_* environment variables."""
        defaults = cls()
        return cls(
            host=os.getenv("GENVIZ_HOST", defaults.host),
            port=int(os.getenv("GENVIZ_PORT", str(defaults.port))),
            public_host=os.getenv("GENVIZ_PUBLIC_HOST", defaults.public_host),
            send_timeout=float(
                os.getenv("GENVIZ_SEND_TIMEOUT", str(defaults.send_timeout))
            ),
            capture_timeout=_optional_float(
                os.getenv("GENVIZ_CAPTURE_TIMEOUT"), defaults.capture_timeout
            ),
            client_wait_timeout=_optional_float(
                os.getenv("GENVIZ_CLIENT_WAIT_TIMEOUT"),
                defaults.client_wait_timeout,
            ),
            settle_delay=float(
                os.getenv("GENVIZ_SETTLE_DELAY", str(defaults.settle_delay))
            ),
        )


def resolve_asset_path(value: PathLike) -> Path:
    """Resolve an asset directory to an absolute path."""
    candidate = Path(value).expanduser()
    return candidate if candidate.is_absolute() else (Path.cwd() / candidate)
