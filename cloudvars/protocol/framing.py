"""Helpers for building outbound frames and decoding inbound ones.

Frames are newline-delimited JSON objects. Decoding never raises: callers get a
``FrameResult`` holding every decoded message, or the first protocol error found
in the frame.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, List, Optional

from cloudvars.errors import ProtocolError
from cloudvars.models import HandshakeMessage, Scalar, SetPush, SetRequest
from cloudvars.protocol.names import is_scalar


@dataclass
class FrameResult:
    """Outcome of decoding one text frame."""

    messages: List[SetPush] = field(default_factory=list)
    error: Optional[ProtocolError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_handshake(*, project_id: str, user: str) -> str:
    """Serialize the handshake frame."""

    return HandshakeMessage(project_id=project_id, user=user).model_dump_json()


def build_set(*, project_id: str, user: str, name: str, value: Scalar) -> str:
    """Serialize a client-side variable update."""

    return SetRequest(project_id=project_id, user=user, name=name, value=value).model_dump_json()


def decode_line(line: str) -> SetPush | ProtocolError | None:
    """Decode one line of a frame.

    Returns the ``SetPush`` for set messages, ``None`` for methods this client does
    not understand, or the ``ProtocolError`` describing why the line is invalid.
    """

    try:
        parsed: Any = json.loads(line)
    except ValueError:
        return ProtocolError(f"Received invalid JSON from server: {line}")

    if not parsed or not isinstance(parsed, dict):
        return ProtocolError(f"Received invalid object from server: {parsed!r}")

    if parsed.get("method") != "set":
        return None

    name = parsed.get("name")
    value = parsed.get("value")
    if not isinstance(name, str):
        return ProtocolError(f"Received invalid name from server: {name!r}")
    if not is_scalar(value):
        return ProtocolError(f"Received invalid value from server: {name}")
    return SetPush(name=name, value=value)


def decode_frame(data: str) -> FrameResult:
    """Decode every non-empty line of ``data``, stopping at the first invalid one."""

    result = FrameResult()
    for line in data.split("\n"):
        if not line:
            continue
        decoded = decode_line(line)
        if isinstance(decoded, ProtocolError):
            return FrameResult(messages=[], error=decoded)
        if decoded is not None:
            result.messages.append(decoded)
    return result
