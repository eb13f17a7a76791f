from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import urlsplit

import websockets
from websockets.asyncio.server import ServerConnection
from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from contracts.ui_protocol import EVENT_ERROR, EVENT_HELLO

from .config import HEALTHZ_PATH, INDEX_PATH, ROOT_PATH, UIServerConfig
from .events import StickyEventStore, make_event, parse_command_message
from .static_files import guess_content_type, resolve_static_file

CommandHandler = Callable[[dict[str, Any]], None]

_TEXT_PLAIN = "text/plain; charset=utf-8"
_TEXT_HTML = "text/html; charset=utf-8"


class UIServer:
    """Serves the breathing page and a websocket that carries both directions.

    Outbound: `publish()` may be called from any thread; events are
    broadcast on the server loop and the sticky ones are replayed to every
    newly connected page. Inbound: command frames are decoded and handed to
    the command handler on the server thread, which must only enqueue them.
    """

    def __init__(
        self,
        config: UIServerConfig,
        logger: Optional[logging.Logger] = None,
        command_handler: Optional[CommandHandler] = None,
    ):
        self._config = config
        self._logger = logger or logging.getLogger("ui_server")
        self._command_handler = command_handler
        self._sticky_events = StickyEventStore()
        self._clients: set[ServerConnection] = set()
        self._index_html = Path(config.index_file).read_bytes()
        self._routes: dict[str, Callable[[], Response]] = {
            ROOT_PATH: self._index_response,
            INDEX_PATH: self._index_response,
            HEALTHZ_PATH: lambda: _response(200, "OK", b"ok\n", _TEXT_PLAIN),
        }

        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._shutdown: Optional[asyncio.Event] = None
        self._ready = threading.Event()
        self._startup_error: Optional[Exception] = None

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def port(self) -> int:
        return self._config.port

    @property
    def client_count(self) -> int:
        return len(self._clients)

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive() and self._startup_error is None

    def set_command_handler(self, handler: Optional[CommandHandler]) -> None:
        self._command_handler = handler

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self.is_running:
            self._logger.warning("UI server is already running")
            return

        self._startup_error = None
        self._ready.clear()
        self._thread = threading.Thread(target=self._thread_main, name="ui-server", daemon=True)
        self._thread.start()

        if not self._ready.wait(timeout_seconds):
            raise RuntimeError(f"UI server did not start within {timeout_seconds:.1f}s")
        if self._startup_error is not None:
            raise RuntimeError(f"UI server startup failed: {self._startup_error}")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        thread = self._thread
        if thread is None:
            return

        loop, shutdown = self._loop, self._shutdown
        if loop is not None and shutdown is not None:
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(shutdown.set)

        thread.join(timeout=timeout_seconds)
        if thread.is_alive():
            self._logger.error("UI server thread did not stop within %.1fs", timeout_seconds)
        self._thread = None

    def publish(self, event_type: str, **payload: Any) -> None:
        """Serialize, remember if sticky, and broadcast to connected pages."""
        message = make_event(event_type, **payload)
        self._sticky_events.remember(event_type, message)

        loop = self._loop
        if loop is None or not self.is_running:
            return
        try:
            future = asyncio.run_coroutine_threadsafe(self._broadcast(message), loop)
        except RuntimeError:
            # Loop already closed.
            return
        future.add_done_callback(_discard_result)

    def _thread_main(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        self._shutdown = asyncio.Event()
        try:
            loop.run_until_complete(self._serve())
        except Exception as error:
            self._startup_error = error
            self._logger.error("UI server failed: %s", error, exc_info=True)
            self._ready.set()
        finally:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            with contextlib.suppress(Exception):
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.close()
            self._loop = None
            self._shutdown = None

    async def _serve(self) -> None:
        async with websockets.serve(
            self._handle_connection,
            host=self._config.host,
            port=self._config.port,
            process_request=self._process_request,
            logger=self._logger,
        ):
            self._logger.info(
                "UI server listening on http://%s:%d (websocket %s)",
                self._config.host,
                self._config.port,
                self._config.websocket_path,
            )
            self._ready.set()
            assert self._shutdown is not None
            await self._shutdown.wait()
            await self._disconnect_all()

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        request = websocket.request
        path = urlsplit(request.path).path if request is not None else ""
        if path != self._config.websocket_path:
            await websocket.close(code=1008, reason="Invalid websocket path")
            return

        self._clients.add(websocket)
        self._logger.info(
            "Page connected: %s (%d open)",
            websocket.remote_address,
            len(self._clients),
        )
        try:
            await websocket.send(make_event(EVENT_HELLO, message="Breathing coach connected"))
            for message in self._sticky_events.snapshot():
                await websocket.send(message)
            async for frame in websocket:
                reply = self._accept_frame(frame)
                if reply is not None:
                    await websocket.send(reply)
        except websockets.exceptions.ConnectionClosed:
            pass
        finally:
            self._clients.discard(websocket)
            self._logger.info("Page disconnected: %s", websocket.remote_address)

    def _accept_frame(self, frame: str | bytes) -> Optional[str]:
        """Forward a command frame; returns an error event for the sender, if any."""
        command = parse_command_message(frame)
        if command is None:
            self._logger.debug("Rejecting malformed frame from page: %r", frame)
            return make_event(EVENT_ERROR, message="Malformed command message")

        handler = self._command_handler
        if handler is None:
            self._logger.warning("No command handler registered; dropping %s", command["command"])
            return make_event(
                EVENT_ERROR,
                message="The session is not accepting commands yet",
                command=command["command"],
            )
        try:
            handler(command)
        except Exception as error:
            self._logger.error("Command handler failed: %s", error, exc_info=True)
            return make_event(EVENT_ERROR, message=str(error), command=command["command"])
        return None

    async def _process_request(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Optional[Response]:
        del connection
        path = urlsplit(request.path).path
        if path == self._config.websocket_path:
            return None

        route = self._routes.get(path)
        if route is not None:
            return route()

        static_file = resolve_static_file(self._config.ui_root, request.path)
        if static_file is None:
            return _response(404, "Not Found", b"not found\n", _TEXT_PLAIN)
        return _response(200, "OK", static_file.read_bytes(), guess_content_type(static_file))

    def _index_response(self) -> Response:
        return _response(200, "OK", self._index_html, _TEXT_HTML)

    async def _broadcast(self, message: str) -> None:
        clients = tuple(self._clients)
        if not clients:
            return
        results = await asyncio.gather(
            *(client.send(message) for client in clients),
            return_exceptions=True,
        )
        for client, result in zip(clients, results):
            if isinstance(result, Exception):
                self._clients.discard(client)
                self._logger.warning("Dropping page after failed send: %s", result)

    async def _disconnect_all(self) -> None:
        clients = tuple(self._clients)
        self._clients.clear()
        await asyncio.gather(
            *(client.close(code=1001, reason="Server shutting down") for client in clients),
            return_exceptions=True,
        )


def _response(status_code: int, reason_phrase: str, body: bytes, content_type: str) -> Response:
    headers = Headers()
    headers["Content-Type"] = content_type
    headers["Content-Length"] = str(len(body))
    headers["Cache-Control"] = "no-store"
    return Response(status_code, reason_phrase, headers, body)


def _discard_result(future) -> None:
    with contextlib.suppress(Exception):
        future.result()
