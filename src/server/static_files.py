"""Static asset lookup under the UI root for the breathing page."""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlsplit

_TEXT_LIKE_TYPES = frozenset(
    {
        "application/javascript",
        "application/json",
        "application/manifest+json",
        "image/svg+xml",
    }
)


def resolve_static_file(ui_root: Path, request_path: str) -> Optional[Path]:
    """Map a request path to a file inside `ui_root`, or None.

    Query strings are dropped and percent escapes decoded before lookup.
    Hidden files and anything resolving outside the root are never served.
    """
    path = unquote(urlsplit(request_path or "").path)
    relative = path.lstrip("/")
    if not relative:
        return None
    if any(part.startswith(".") and part not in {".", ".."} for part in Path(relative).parts):
        return None

    root = ui_root.resolve()
    candidate = (root / relative).resolve()
    if root not in candidate.parents or not candidate.is_file():
        return None
    return candidate


def guess_content_type(path: Path) -> str:
    mime_type, _ = mimetypes.guess_type(path.name)
    if path.suffix == ".webmanifest":
        mime_type = "application/manifest+json"
    if not mime_type:
        return "application/octet-stream"
    if mime_type.startswith("text/") or mime_type in _TEXT_LIKE_TYPES:
        return f"{mime_type}; charset=utf-8"
    return mime_type
