"""Network stack (transport/session controller) for cloud variables."""

from cloudvars.network.backoff import compute_backoff
from cloudvars.network.connection import CloseCode, CloudConnection, generate_username
from cloudvars.network.listener import CloudListener
from cloudvars.network.session_state import SessionState, SessionTracker
from cloudvars.network.transport.base import BaseTransport
from cloudvars.network.transport.dummy import DummyTransport
from cloudvars.network.transport.websocket import WebSocketTransport
from cloudvars.network.values import OutboundQueue, ValueStore

__all__ = [
    "CloudConnection",
    "CloudListener",
    "CloseCode",
    "SessionState",
    "SessionTracker",
    "ValueStore",
    "OutboundQueue",
    "BaseTransport",
    "WebSocketTransport",
    "DummyTransport",
    "compute_backoff",
    "generate_username",
]
