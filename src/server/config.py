"""Settings for the breathing page server: bind address, page location, routes."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class ServerConfigurationError(Exception):
    """Raised when UI server configuration is invalid."""


WEBSOCKET_PATH = "/ws"
ROOT_PATH = "/"
INDEX_PATH = "/index.html"
HEALTHZ_PATH = "/healthz"


def bundled_index_file() -> Path:
    """The page shipped in web_ui/, also inside a frozen bundle."""
    bundle_root = getattr(sys, "_MEIPASS", None)
    base_dir = Path(bundle_root) if bundle_root else Path(__file__).resolve().parents[2]
    return base_dir / "web_ui" / "index.html"


def _index_file_problem(index_file: str) -> Optional[str]:
    if not index_file:
        return "ui_server.index_file cannot be empty"
    path = Path(index_file)
    if path.is_file():
        return None
    if path.exists():
        return f"UI index path is not a file: {path}"
    return f"UI index file not found: {path}"


@dataclass(frozen=True)
class UIServerConfig:
    """Validated `[ui_server]` values; the page is only checked when enabled."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    index_file: str = ""

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise ServerConfigurationError("ui_server.host cannot be empty")
        if self.port < 1 or self.port > 65535:
            raise ServerConfigurationError(
                f"ui_server.port must be in [1, 65535], got: {self.port}"
            )
        problem = _index_file_problem(self.index_file) if self.enabled else None
        if problem:
            raise ServerConfigurationError(problem)

    @property
    def websocket_path(self) -> str:
        return WEBSOCKET_PATH

    @property
    def ui_root(self) -> Path:
        """Directory whose files are served next to the page."""
        return Path(self.index_file).resolve().parent

    @classmethod
    def from_settings(cls, settings) -> "UIServerConfig":
        index_file = (settings.index_file or "").strip() or str(bundled_index_file())
        return cls(
            enabled=bool(settings.enabled),
            host=settings.host,
            port=settings.port,
            index_file=index_file,
        )
