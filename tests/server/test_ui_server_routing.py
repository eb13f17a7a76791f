import asyncio
import json
import sys
import tempfile
import types
import unittest
from pathlib import Path

from websockets.datastructures import Headers
from websockets.http11 import Request

# Import server modules without executing src/server/__init__.py.
_SERVER_DIR = Path(__file__).resolve().parents[2] / "src" / "server"
if "server" not in sys.modules:
    _pkg = types.ModuleType("server")
    _pkg.__path__ = [str(_SERVER_DIR)]  # type: ignore[attr-defined]
    sys.modules["server"] = _pkg

from server.config import UIServerConfig
from server.service import UIServer


class UIServerRoutingTests(unittest.TestCase):
    def setUp(self) -> None:
        temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(temp_dir.cleanup)
        ui_root = Path(temp_dir.name)
        (ui_root / "index.html").write_text("<h1>breathe</h1>", encoding="utf-8")
        (ui_root / "app.js").write_text("// app", encoding="utf-8")
        self.received: list[dict[str, object]] = []
        self.server = UIServer(
            UIServerConfig(enabled=True, index_file=str(ui_root / "index.html")),
            command_handler=self.received.append,
        )

    def _get(self, path: str):
        request = Request(path, Headers())
        return asyncio.run(self.server._process_request(None, request))

    def test_index_and_root_serve_page(self) -> None:
        for path in ("/", "/index.html", "/?debug=1"):
            with self.subTest(path=path):
                response = self._get(path)
                self.assertEqual(200, response.status_code)
                self.assertEqual(b"<h1>breathe</h1>", response.body)
                self.assertTrue(response.headers["Content-Type"].startswith("text/html"))

    def test_healthz(self) -> None:
        response = self._get("/healthz")
        self.assertEqual(200, response.status_code)
        self.assertEqual(b"ok\n", response.body)

    def test_static_asset_and_missing_path(self) -> None:
        asset = self._get("/app.js")
        missing = self._get("/missing.css")

        self.assertEqual(200, asset.status_code)
        self.assertEqual(b"// app", asset.body)
        self.assertEqual(404, missing.status_code)

    def test_websocket_path_is_left_to_handshake(self) -> None:
        self.assertIsNone(self._get("/ws"))

    def test_command_frames_reach_handler(self) -> None:
        reply = self.server._accept_frame('{"type": "command", "command": "press"}')

        self.assertIsNone(reply)
        self.assertEqual([{"type": "command", "command": "press"}], self.received)

    def test_malformed_frame_gets_error_reply(self) -> None:
        reply = self.server._accept_frame('{"type": "command"}')

        self.assertEqual("error", json.loads(reply)["type"])
        self.assertEqual([], self.received)

    def test_publish_remembers_sticky_events_while_stopped(self) -> None:
        self.server.publish("session", state="ready")
        self.server.publish("prompt", text="Breathe in and hold")

        snapshot = [json.loads(item) for item in self.server._sticky_events.snapshot()]
        self.assertEqual(["session"], [item["type"] for item in snapshot])
        self.assertFalse(self.server.is_running)
        self.assertEqual(0, self.server.client_count)


if __name__ == "__main__":
    unittest.main()
