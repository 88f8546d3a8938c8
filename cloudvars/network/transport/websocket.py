"""WebSocket transport implementation."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Mapping, Optional

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from cloudvars.errors import TransportClosed
from cloudvars.network.transport.base import ABNORMAL_CLOSURE, BaseTransport

LOGGER = logging.getLogger(__name__)

_CLOSE = object()


def close_code_of(exc: ConnectionClosed) -> int:
    """Return the close code the server sent, or 1006 when none was received."""

    if exc.rcvd is not None:
        return exc.rcvd.code
    return ABNORMAL_CLOSURE


class WebSocketTransport(BaseTransport):
    """``websockets``-based transport with an ordered background writer."""

    def __init__(self, endpoint: str, headers: Optional[Mapping[str, str]] = None) -> None:
        self.endpoint = endpoint
        self._headers = dict(headers or {})
        self._ws: Optional[ClientConnection] = None
        self._outbox: asyncio.Queue[object] = asyncio.Queue()
        self._writer_task: Optional[asyncio.Task[None]] = None
        self._closing = False
        self._close_task: Optional[asyncio.Task[None]] = None

    async def connect(self) -> None:
        LOGGER.info("Connecting to cloud server at %s", self.endpoint)
        headers = dict(self._headers)
        user_agent = headers.pop("User-Agent", None)
        kwargs = {"additional_headers": headers or None}
        if user_agent is not None:
            kwargs["user_agent_header"] = user_agent
        try:
            self._ws = await connect(self.endpoint, **kwargs)
        except ConnectionClosed as exc:
            raise TransportClosed(close_code_of(exc), str(exc)) from exc
        except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
            raise TransportClosed(ABNORMAL_CLOSURE, str(exc)) from exc
        if self._closing:
            await self._ws.close()
            raise TransportClosed(ABNORMAL_CLOSURE, "closed during connect")
        self._writer_task = asyncio.create_task(self._write_loop(), name="cloudvars-writer")

    def send(self, text: str) -> None:
        if self._closing:
            raise RuntimeError("WebSocket transport is closing")
        LOGGER.debug("WebSocket send: %s", text)
        self._outbox.put_nowait(text)

    async def receive(self) -> str | bytes:
        if not self._ws:
            raise RuntimeError("WebSocket transport not connected")
        try:
            raw = await self._ws.recv()
        except ConnectionClosed as exc:
            raise TransportClosed(close_code_of(exc), exc.rcvd.reason if exc.rcvd else "") from exc
        LOGGER.debug("WebSocket receive: %s", raw)
        return raw

    def close(self) -> None:
        if self._closing:
            return
        self._closing = True
        if self._writer_task is not None:
            # The writer sends everything already queued before closing the socket.
            self._outbox.put_nowait(_CLOSE)
        elif self._ws is not None:
            self._close_task = asyncio.get_running_loop().create_task(self._ws.close())

    async def _write_loop(self) -> None:
        assert self._ws is not None
        while True:
            item = await self._outbox.get()
            if item is _CLOSE:
                LOGGER.info("Closing WebSocket transport")
                with contextlib.suppress(WebSocketException, OSError):
                    await self._ws.close()
                return
            try:
                await self._ws.send(item)  # type: ignore[arg-type]
            except ConnectionClosed:
                # receive() reports the close code and drives reconnection.
                LOGGER.debug("Dropping frame for closed socket %s", self.endpoint)
                return
