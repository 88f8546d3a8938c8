"""Event sink interface for connection events."""

from __future__ import annotations

from cloudvars.models import Scalar


class CloudListener:
    """Receives connection events. Override only the events you care about."""

    def on_connected(self) -> None:
        """A connection opened and the handshake was sent.

        No variable has a value from the server yet at this point.
        """

    def on_reconnecting(self) -> None:
        """The connection was lost and a reconnect has been scheduled."""

    def on_set(self, name: str, value: Scalar) -> None:
        """The server pushed a new value for ``name``."""

    def on_error(self, error: Exception) -> None:
        """The session ended with an unrecoverable error."""
