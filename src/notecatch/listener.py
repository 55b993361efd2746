# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Loopback-only HTTP listener for hotkey clients.

``GET /`` is a liveness probe. ``POST /<text>`` catches ``<text>``: the raw
path segment (1-80 characters, none of ``/ ? & #``) is form-decoded and
handed to the capture callback. Both answer ``Success`` whatever the
capture outcome; the outcome only reaches the user through the
callback's own notification. Everything else is a 404.
"""

from __future__ import annotations

import asyncio
import errno
import inspect
import re
import socket
import sys
from enum import Enum
from typing import TYPE_CHECKING
from urllib.parse import unquote_plus

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from notecatch.config import parse_port
from notecatch.defaults import LISTEN_HOST, NOT_FOUND_BODY, SEGMENT_PATTERN, SUCCESS_BODY
from notecatch.errors import BindError
from notecatch.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    OnCapture = Callable[[str], str | Awaitable[str]]

logger = get_logger(__name__)

_SEGMENT_RE = re.compile(SEGMENT_PATTERN)
_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
_STARTUP_POLL_S = 0.01
_ADDR_IN_USE = {errno.EADDRINUSE, getattr(errno, "WSAEADDRINUSE", errno.EADDRINUSE)}


class ListenerState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


def _raw_path(request: Request) -> str:
    raw = request.scope.get("raw_path")
    if isinstance(raw, bytes):
        return raw.decode("latin-1")
    return request.url.path


def _client(request: Request) -> str:
    return request.client.host if request.client else "-"


def capture_text(raw_path: str) -> str | None:
    """Return the caught text for a raw request path, or None if it is not a capture path."""
    if not _SEGMENT_RE.fullmatch(raw_path):
        return None
    return unquote_plus(raw_path[1:])


def create_capture_app(on_capture: OnCapture) -> FastAPI:
    """Build the ASGI app serving the probe and capture routes."""
    app = FastAPI(title="notecatch", docs_url=None, redoc_url=None, openapi_url=None)

    @app.exception_handler(StarletteHTTPException)
    async def unrouted(request: Request, exc: StarletteHTTPException) -> Response:
        # Methods outside the capture route would otherwise get a 405.
        if exc.status_code == 405:
            return PlainTextResponse(NOT_FOUND_BODY, status_code=404)
        return await http_exception_handler(request, exc)

    @app.get("/", response_class=PlainTextResponse)
    async def probe(request: Request) -> str:
        logger.info("probe_received", client=_client(request), path=_raw_path(request))
        return SUCCESS_BODY

    @app.api_route("/{segment:path}", methods=_ALL_METHODS, response_class=PlainTextResponse)
    async def capture(request: Request) -> PlainTextResponse:
        raw_path = _raw_path(request)
        text = capture_text(raw_path)
        if request.method != "POST" or request.scope.get("query_string") or text is None:
            logger.debug("route_not_found", client=_client(request), method=request.method, path=raw_path)
            return PlainTextResponse(NOT_FOUND_BODY, status_code=404)

        message = on_capture(text)
        if inspect.isawaitable(message):
            message = await message
        logger.info("capture_received", client=_client(request), path=raw_path, message=message)
        return PlainTextResponse(SUCCESS_BODY)

    return app


def bind_loopback(port: int) -> socket.socket:
    """Bind and listen on ``127.0.0.1:port``.

    Raises:
        BindError: If the port is invalid or already in use
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        if sys.platform != "win32":
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((LISTEN_HOST, port))
        sock.listen()
    except OverflowError as e:
        sock.close()
        raise BindError(port, "port must be 0-65535") from e
    except OSError as e:
        sock.close()
        reason = "port already in use" if e.errno in _ADDR_IN_USE else (e.strerror or str(e))
        raise BindError(port, reason) from e
    sock.setblocking(False)
    return sock


class CaptureListener:
    """Lifecycle of the single capture server.

    ``STOPPED --start--> RUNNING --stop--> STOPPED``. A failed start (port in
    use, invalid port, already running) is logged and leaves the state
    unchanged. Starts and stops are serialized, so a start still waiting for
    uvicorn blocks any other start or stop.
    """

    def __init__(self) -> None:
        self._server: uvicorn.Server | None = None
        self._task: asyncio.Task[None] | None = None
        self._socket: socket.socket | None = None
        self._port: int | None = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> ListenerState:
        return ListenerState.RUNNING if self._server is not None else ListenerState.STOPPED

    @property
    def port(self) -> int | None:
        return self._port

    @property
    def url(self) -> str | None:
        if self._port is None:
            return None
        return f"http://localhost:{self._port}"

    async def start(self, port: int | str, on_capture: OnCapture) -> bool:
        """Start serving on the loopback interface.

        Returns:
            True when the listener is running, False if it could not start
        """
        port_num = parse_port(port)
        async with self._lock:
            return await self._start(port_num, on_capture)

    async def _start(self, port_num: int, on_capture: OnCapture) -> bool:
        try:
            if self._server is not None:
                raise BindError(port_num, f"capture listener already running on port {self._port}")
            sock = bind_loopback(port_num)
        except BindError as e:
            logger.error("bind_failed", port=port_num, error=e.reason)
            return False

        config = uvicorn.Config(
            create_capture_app(on_capture),
            log_level="warning",
            access_log=False,
            lifespan="off",
        )
        server = uvicorn.Server(config)
        task = asyncio.create_task(server.serve(sockets=[sock]))
        while not server.started:
            if task.done():
                sock.close()
                error = None if task.cancelled() else task.exception()
                logger.error("capture_listener_failed", port=port_num, error=str(error))
                return False
            await asyncio.sleep(_STARTUP_POLL_S)

        self._server = server
        self._task = task
        self._socket = sock
        self._port = sock.getsockname()[1]
        logger.info("capture_listener_started", url=self.url)
        return True

    async def stop(self) -> None:
        """Stop serving and release the port. No-op when not running."""
        async with self._lock:
            await self._stop()

    async def _stop(self) -> None:
        if self._server is None:
            logger.debug("capture_listener_not_running")
            return
        self._server.should_exit = True
        task = self._task
        sock = self._socket
        port = self._port
        self._server = None
        self._task = None
        self._socket = None
        self._port = None
        try:
            if task is not None:
                await task
        finally:
            if sock is not None:
                sock.close()
        logger.info("capture_listener_stopped", port=port)

    async def wait_stopped(self) -> None:
        """Block until the server task exits (e.g. on SIGINT)."""
        if self._task is not None:
            await self._task
