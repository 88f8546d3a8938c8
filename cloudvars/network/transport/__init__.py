"""Transport implementations for the cloud variable connection."""

from .base import ABNORMAL_CLOSURE, BaseTransport, TransportFactory
from .dummy import DummyTransport
from .websocket import WebSocketTransport

__all__ = ["ABNORMAL_CLOSURE", "BaseTransport", "DummyTransport", "TransportFactory", "WebSocketTransport"]
