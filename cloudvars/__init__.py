"""Resilient client for TurboWarp-style cloud variables.

Public API:
- CloudConnection: keeps a session alive and mirrors variable values
- CloudListener: event sink for connected/reconnecting/set/error
- CloudSettings, load_settings, get_settings: configuration
- WebSocketTransport, DummyTransport: transports
"""

from cloudvars._version import __version__
from cloudvars.config import CloudSettings, get_settings, load_settings
from cloudvars.errors import (
    CloudError,
    ConfigError,
    ProtocolError,
    SessionRejected,
    TransportClosed,
    ValidationError,
)
from cloudvars.network import (
    CloseCode,
    CloudConnection,
    CloudListener,
    DummyTransport,
    SessionState,
    WebSocketTransport,
)
from cloudvars.protocol import CLOUD_PREFIX, to_variable_name

__all__ = [
    "__version__",
    "CLOUD_PREFIX",
    "CloseCode",
    "CloudConnection",
    "CloudError",
    "CloudListener",
    "CloudSettings",
    "ConfigError",
    "DummyTransport",
    "ProtocolError",
    "SessionRejected",
    "SessionState",
    "TransportClosed",
    "ValidationError",
    "WebSocketTransport",
    "get_settings",
    "load_settings",
    "to_variable_name",
]
