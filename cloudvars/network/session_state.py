"""Session state tracking for a cloud variable connection."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone


class SessionState(enum.Enum):
    """Client-side session state machine."""

    CONNECTING = "CONNECTING"
    OPEN = "OPEN"
    CLOSED = "CLOSED"


@dataclass
class SessionTracker:
    """In-memory session metadata."""

    state: SessionState = SessionState.CONNECTING
    last_transition_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @property
    def is_open(self) -> bool:
        return self.state is SessionState.OPEN

    @property
    def is_closed(self) -> bool:
        return self.state is SessionState.CLOSED

    def transition(self, next_state: SessionState) -> None:
        """Move the session into a new state, validating allowed transitions."""

        if not self._is_valid_transition(self.state, next_state):
            raise ValueError(f"Invalid transition {self.state.value} → {next_state.value}")
        self.state = next_state
        self.last_transition_at = datetime.now(tz=timezone.utc)

    @staticmethod
    def _is_valid_transition(current: SessionState, nxt: SessionState) -> bool:
        allowed = {
            SessionState.CONNECTING: {SessionState.CONNECTING, SessionState.OPEN, SessionState.CLOSED},
            SessionState.OPEN: {SessionState.CONNECTING, SessionState.CLOSED},
            SessionState.CLOSED: set(),
        }
        return nxt in allowed.get(current, set())
