"""In-memory transport for offline use and tests."""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Optional

from cloudvars.errors import TransportClosed
from cloudvars.network.transport.base import ABNORMAL_CLOSURE, BaseTransport

LOGGER = logging.getLogger(__name__)


class DummyTransport(BaseTransport):
    """Scriptable transport that records sent frames.

    ``feed`` delivers a frame to the client, ``server_close`` simulates the
    server closing the socket and ``fail_connect`` makes ``connect`` fail the
    way an unreachable host would.
    """

    def __init__(self, endpoint: str = "dummy://", headers: Optional[Mapping[str, str]] = None) -> None:
        self.endpoint = endpoint
        self.headers = dict(headers or {})
        self.sent: list[str] = []
        self.connected = False
        self.closed = False
        self._inbox: asyncio.Queue[str | bytes | TransportClosed] = asyncio.Queue()
        self._connect_gate = asyncio.Event()
        self._connect_gate.set()
        self._connect_error: Optional[TransportClosed] = None

    def hold_connect(self) -> None:
        """Keep ``connect`` pending until ``release_connect`` is called."""

        self._connect_gate.clear()

    def release_connect(self) -> None:
        self._connect_gate.set()

    def fail_connect(self, code: int = ABNORMAL_CLOSURE) -> None:
        self._connect_error = TransportClosed(code, "connect failed")

    async def connect(self) -> None:
        LOGGER.debug("Dummy transport connect(%s)", self.endpoint)
        await self._connect_gate.wait()
        if self._connect_error is not None:
            raise self._connect_error
        if self.closed:
            raise TransportClosed(ABNORMAL_CLOSURE, "closed during connect")
        self.connected = True

    def send(self, text: str) -> None:
        if not self.connected:
            raise RuntimeError("Dummy transport is not open")
        LOGGER.debug("Dummy transport send(): %s", text)
        self.sent.append(text)

    async def receive(self) -> str | bytes:
        item = await self._inbox.get()
        if isinstance(item, TransportClosed):
            self.connected = False
            raise item
        return item

    def close(self) -> None:
        LOGGER.debug("Dummy transport close()")
        self.closed = True
        self.connected = False

    def feed(self, frame: str | bytes) -> None:
        self._inbox.put_nowait(frame)

    def server_close(self, code: int, reason: str = "") -> None:
        self._inbox.put_nowait(TransportClosed(code, reason))
