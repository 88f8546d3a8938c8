"""Transport abstractions for the cloud variable connection."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Mapping

# Close code reported when a socket drops without a close frame.
ABNORMAL_CLOSURE = 1006


class BaseTransport(ABC):
    """Abstract message-oriented socket used by ``CloudConnection``.

    ``send`` and ``close`` must not block: they are called from synchronous
    code on the event loop. ``receive`` raises ``TransportClosed`` once the
    socket is gone.
    """

    endpoint: str

    @abstractmethod
    async def connect(self) -> None:
        ...

    @abstractmethod
    def send(self, text: str) -> None:
        ...

    @abstractmethod
    async def receive(self) -> str | bytes:
        ...

    @abstractmethod
    def close(self) -> None:
        ...


TransportFactory = Callable[[str, Mapping[str, str]], BaseTransport]
