"""Websocket frame helpers: outbound event encoding, inbound command decoding, replay cache."""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from contracts.ui_protocol import MESSAGE_COMMAND, STICKY_EVENT_ORDER, STICKY_EVENT_TYPES


def make_event(
    event_type: str,
    *,
    now_fn: Callable[[], datetime] | None = None,
    **payload: Any,
) -> str:
    """JSON text frame `{"type", "timestamp", **payload}` stamped in UTC."""
    stamp = (now_fn or _utc_now)()
    frame: dict[str, Any] = {"type": event_type, "timestamp": stamp.isoformat()}
    frame.update(payload)
    return json.dumps(frame)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_command_message(raw: str | bytes) -> Optional[dict[str, Any]]:
    """Decode a websocket text frame into a command dict, or None if it is not one."""
    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        decoded = json.loads(text)
    except ValueError:
        # UnicodeDecodeError and JSONDecodeError are both ValueErrors.
        return None

    if not isinstance(decoded, dict) or decoded.get("type") != MESSAGE_COMMAND:
        return None
    name = decoded.get("command")
    if isinstance(name, str) and name.strip():
        return decoded
    return None


class StickyEventStore:
    """Latest frame per sticky type, replayed to each page as it connects.

    Written from the runtime thread, read from the server loop.
    """

    def __init__(self):
        self._latest: dict[str, str] = {}
        self._lock = threading.Lock()

    def remember(self, event_type: str, message: str) -> bool:
        sticky = event_type in STICKY_EVENT_TYPES
        if sticky:
            with self._lock:
                self._latest[event_type] = message
        return sticky

    def snapshot(self) -> list[str]:
        """Frames in replay order; session state goes last so it renders on top."""
        with self._lock:
            latest = dict(self._latest)
        return [latest[event_type] for event_type in STICKY_EVENT_ORDER if event_type in latest]
