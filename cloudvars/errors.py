"""Exception hierarchy for the cloud variable client."""

from __future__ import annotations


class CloudError(RuntimeError):
    """Base class for every error raised by the client."""


class ConfigError(CloudError):
    """Raised when connection settings are missing or malformed."""


class ValidationError(CloudError):
    """Raised when a caller passes an invalid variable name or value."""


class ProtocolError(CloudError):
    """Raised when the server sends data that violates the protocol."""


class SessionRejected(CloudError):
    """Raised when the server closes the socket with a terminal close code."""

    def __init__(self, message: str, code: int) -> None:
        super().__init__(message)
        self.code = code


class TransportClosed(CloudError):
    """Raised by transports once the underlying socket has closed."""

    def __init__(self, code: int, reason: str = "") -> None:
        super().__init__(f"Transport closed with code {code}: {reason}" if reason else f"Transport closed with code {code}")
        self.code = code
        self.reason = reason
