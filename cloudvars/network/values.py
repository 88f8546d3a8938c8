"""Authoritative value cache and outbound message queue."""

from __future__ import annotations

from collections import deque
from typing import Deque, Dict, Iterator, List, Optional

from cloudvars.models import Scalar


class ValueStore:
    """Most recent value of every variable seen locally or from the server."""

    def __init__(self) -> None:
        self._values: Dict[str, Scalar] = {}

    def set(self, name: str, value: Scalar) -> None:
        self._values[name] = value

    def get(self, name: str) -> Optional[Scalar]:
        return self._values.get(name)

    def snapshot(self) -> Dict[str, Scalar]:
        return dict(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)


class OutboundQueue:
    """Serialized frames waiting for the next successful open."""

    def __init__(self) -> None:
        self._pending: Deque[str] = deque()

    def push(self, message: str) -> None:
        self._pending.append(message)

    def drain(self) -> List[str]:
        """Return every queued frame in FIFO order and empty the queue."""

        drained = list(self._pending)
        self._pending.clear()
        return drained

    def __iter__(self) -> Iterator[str]:
        return iter(self._pending)

    def __len__(self) -> int:
        return len(self._pending)
