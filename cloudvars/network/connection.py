"""Session controller for the cloud variable protocol.

``CloudConnection`` is responsible for:
- Transport lifecycle (connect, round-robin endpoints, randomised reconnect)
- The handshake and flushing of queued updates on every open
- Decoding inbound frames into ``set`` events
- The authoritative value cache behind ``get``

All work happens on the event loop that constructed the connection. ``set``,
``get`` and ``close`` are synchronous and never wait for the network.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import random
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, Optional

from cloudvars._version import __version__
from cloudvars.config import CloudSettings, load_settings
from cloudvars.errors import CloudError, ConfigError, SessionRejected, TransportClosed, ValidationError
from cloudvars.models import Scalar
from cloudvars.network.backoff import RandomSource, compute_backoff
from cloudvars.network.listener import CloudListener
from cloudvars.network.session_state import SessionState, SessionTracker
from cloudvars.network.transport.base import ABNORMAL_CLOSURE, BaseTransport, TransportFactory
from cloudvars.network.transport.websocket import WebSocketTransport
from cloudvars.network.values import OutboundQueue, ValueStore
from cloudvars.protocol import build_handshake, build_set, decode_frame, is_scalar, to_variable_name

LOGGER = logging.getLogger(__name__)

USER_AGENT_PRODUCT = "cloudvars"


class CloseCode(enum.IntEnum):
    """Close codes the server uses to reject a session for good."""

    INVALID_USERNAME = 4002
    PROJECT_DISABLED = 4004
    INVALID_USER_AGENT = 4006


def generate_username(rng: RandomSource) -> str:
    """Return a ``playerNNNN`` username."""

    return f"player{int(rng() * 10000) % 10000:04d}"


class CloudConnection:
    """Keeps one cloud variable session alive and mirrors its variables."""

    def __init__(
        self,
        settings: CloudSettings | Mapping[str, Any],
        *,
        transport_factory: Optional[TransportFactory] = None,
        listeners: Iterable[CloudListener] = (),
        rng: Optional[RandomSource] = None,
    ) -> None:
        if not isinstance(settings, CloudSettings):
            settings = load_settings(**dict(settings))
        self._settings = settings
        self._rng: RandomSource = rng or random.random
        self._username = settings.username if settings.username is not None else generate_username(self._rng)
        self._transport_factory: TransportFactory = transport_factory or WebSocketTransport
        self._listeners: list[CloudListener] = list(listeners)
        self._session = SessionTracker()
        self._values = ValueStore()
        self._outbox = OutboundQueue()
        self._attempts = 0
        self._transport: Optional[BaseTransport] = None
        self._driver: Optional[asyncio.Task[None]] = None
        self._reconnect_handle: Optional[asyncio.TimerHandle] = None
        self._error: Optional[BaseException] = None
        self._closed = asyncio.Event()

        self._open_connection()

    # ---- public surface ----

    @property
    def settings(self) -> CloudSettings:
        return self._settings

    @property
    def project_id(self) -> str:
        return self._settings.project_id

    @property
    def username(self) -> str:
        return self._username

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def state_changed_at(self) -> datetime:
        """UTC time of the last session state change."""

        return self._session.last_transition_at

    @property
    def attempts(self) -> int:
        """Connection attempts since the last successful open."""

        return self._attempts

    @property
    def error(self) -> Optional[BaseException]:
        """The error that terminated the session, if any."""

        return self._error

    @property
    def variables(self) -> dict[str, Scalar]:
        """Snapshot of every known variable value."""

        return self._values.snapshot()

    def add_listener(self, listener: CloudListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: CloudListener) -> None:
        self._listeners.remove(listener)

    def set(self, name: str, value: Scalar) -> None:
        """Update a variable. ``"☁ "`` is prepended to ``name`` if missing.

        The value is visible through ``get`` immediately. The update is sent now
        if the session is open, otherwise it is queued for the next open.
        Invalid names or values terminate the session.
        """

        if not isinstance(name, str):
            self._terminate(ValidationError(f"Invalid variable name: {name!r}"))
        if not is_scalar(value):
            self._terminate(ValidationError(f"Invalid variable value: {value!r}"))

        name = to_variable_name(name)
        self._values.set(name, value)
        if self._session.is_closed:
            LOGGER.debug("Session closed; not sending update for %s", name)
            return

        message = build_set(
            project_id=self._settings.project_id,
            user=self._username,
            name=name,
            value=value,
        )
        if self._session.is_open and self._transport is not None:
            self._transport.send(message)
        else:
            self._outbox.push(message)

    def get(self, name: str) -> Optional[Scalar]:
        """Return the most recently set or received value, or ``None`` if unknown."""

        if not isinstance(name, str):
            raise ValidationError(f"Invalid variable name: {name!r}")
        return self._values.get(to_variable_name(name))

    def close(self) -> None:
        """End the session for good. Emits no events and is safe to call repeatedly."""

        if self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None

        transport, self._transport = self._transport, None
        driver, self._driver = self._driver, None
        if driver is not None and not driver.done() and driver is not _current_task():
            driver.cancel()
        if transport is not None:
            transport.close()

        if not self._session.is_closed:
            self._session.transition(SessionState.CLOSED)
            LOGGER.info("Closed cloud session for project %s", self._settings.project_id)
        self._closed.set()

    async def wait_closed(self) -> None:
        """Wait until the session ends; re-raise the error that ended it, if any."""

        await self._closed.wait()
        if self._error is not None:
            raise self._error

    async def __aenter__(self) -> CloudConnection:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---- lifecycle ----

    def _open_connection(self) -> None:
        hosts = self._settings.cloud_hosts
        endpoint = hosts[self._attempts % len(hosts)]
        self._attempts += 1
        headers = self._build_headers()

        loop = asyncio.get_running_loop()
        LOGGER.info("Opening cloud connection to %s (attempt %s)", endpoint, self._attempts)
        transport = self._transport_factory(endpoint, headers)
        self._transport = transport
        driver = loop.create_task(self._drive(transport), name="cloudvars-session")
        driver.add_done_callback(self._on_driver_done)
        self._driver = driver

    def _build_headers(self) -> dict[str, str]:
        if self._settings.platform == "browser":
            return {}
        user_agent = self._settings.user_agent
        if not user_agent:
            raise ConfigError(
                "The user_agent setting is required on native platforms. It should contain your contact information."
            )
        return {"User-Agent": f"{USER_AGENT_PRODUCT}/{__version__} :: {user_agent}"}

    def _reconnect(self) -> None:
        self._reconnect_handle = None
        if self._session.is_closed:
            return
        try:
            self._open_connection()
        except CloudError as exc:
            # Raised from a timer callback: record it for wait_closed().
            self._fail(exc)

    async def _drive(self, transport: BaseTransport) -> None:
        """Turn transport activity into open/message/close notifications."""

        try:
            await transport.connect()
        except TransportClosed as exc:
            self._transport_lost(transport, exc.code)
            return
        except Exception as exc:  # noqa: BLE001
            self._handle_error(transport, exc)
            self._transport_lost(transport, ABNORMAL_CLOSURE)
            return

        if self._transport is not transport:
            transport.close()
            return
        self._handle_open(transport)

        while self._transport is transport:
            try:
                frame = await transport.receive()
            except TransportClosed as exc:
                self._transport_lost(transport, exc.code)
                return
            except Exception as exc:  # noqa: BLE001
                self._handle_error(transport, exc)
                self._transport_lost(transport, ABNORMAL_CLOSURE)
                return
            if self._transport is not transport:
                return
            self._handle_message(frame)

    def _on_driver_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        if isinstance(exc, CloudError):
            LOGGER.debug("Cloud session driver stopped: %s", exc)
            return
        LOGGER.error("Cloud session driver crashed", exc_info=exc)
        self._fail(exc)

    def _transport_lost(self, transport: BaseTransport, code: int) -> None:
        transport.close()
        if self._transport is not transport:
            return
        self._handle_close(code)

    # ---- notifications ----

    def _handle_open(self, transport: BaseTransport) -> None:
        transport.send(build_handshake(project_id=self._settings.project_id, user=self._username))
        for message in self._outbox.drain():
            transport.send(message)

        self._attempts = 0
        self._session.transition(SessionState.OPEN)
        LOGGER.info("Cloud connection open to %s as %s", transport.endpoint, self._username)
        self._emit("on_connected")

    def _handle_message(self, frame: str | bytes) -> None:
        if not isinstance(frame, str):
            LOGGER.debug("Ignoring binary frame (%s bytes)", len(frame))
            return

        result = decode_frame(frame)
        if result.error is not None:
            self._terminate(result.error)

        for message in result.messages:
            self._values.set(message.name, message.value)
            self._emit("on_set", message.name, message.value)
            if self._session.is_closed:
                return

    def _handle_close(self, code: int) -> None:
        self._transport = None
        self._driver = None

        if code == CloseCode.INVALID_USERNAME:
            self._terminate(SessionRejected(f"Invalid username: {self._username}", code))
        if code == CloseCode.PROJECT_DISABLED:
            self._terminate(
                SessionRejected(f"Cloud variables are disabled for project: {self._settings.project_id}", code)
            )
        if code == CloseCode.INVALID_USER_AGENT:
            self._terminate(SessionRejected(f"Invalid user agent: {self._settings.user_agent}", code))

        self._session.transition(SessionState.CONNECTING)
        self._emit("on_reconnecting")
        if self._session.is_closed:
            return

        delay_ms = compute_backoff(
            self._attempts,
            self._rng,
            base_delay_ms=self._settings.reconnect_base_delay_ms,
            max_multiplier=self._settings.reconnect_max_multiplier,
        )
        LOGGER.warning("Cloud connection closed with code %s; reconnecting in %.2fs", code, delay_ms / 1000)
        loop = asyncio.get_running_loop()
        self._reconnect_handle = loop.call_later(delay_ms / 1000, self._reconnect)

    def _handle_error(self, transport: BaseTransport, exc: Exception) -> None:
        # Informational only: the close that follows drives reconnection.
        LOGGER.warning("Transport error on %s: %s", transport.endpoint, exc)

    # ---- terminal failures ----

    def _terminate(self, error: CloudError) -> None:
        self._fail(error)
        raise error

    def _fail(self, error: BaseException) -> None:
        if self._session.is_closed:
            return
        self._error = error
        self.close()
        LOGGER.error("Cloud session terminated: %s", error)
        self._emit("on_error", error)

    def _emit(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners):
            try:
                getattr(listener, event)(*args)
            except Exception:  # noqa: BLE001
                LOGGER.debug("Suppress listener %s callback error", event, exc_info=True)


def _current_task() -> Optional[asyncio.Task[Any]]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
