"""Connection ready-state machine.

RAW ──start()──→ CONNECTING ──[transport open]──→ OPEN
                     │                              │
                     └────[error / stream end]──────┴──→ CLOSED ──[retry]──→ CONNECTING

CONNECTING / OPEN / CLOSED ──close()──→ SHUTDOWN ──start()──→ CONNECTING
"""

from __future__ import annotations

import enum

import structlog

log = structlog.get_logger()


class ReadyState(enum.Enum):
    RAW = "RAW"
    CONNECTING = "CONNECTING"
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    SHUTDOWN = "SHUTDOWN"


ACTIVE_STATES = frozenset({ReadyState.CONNECTING, ReadyState.OPEN})

# Valid transitions: (from_state, to_state)
VALID_TRANSITIONS: set[tuple[ReadyState, ReadyState]] = {
    (ReadyState.RAW, ReadyState.CONNECTING),
    (ReadyState.CONNECTING, ReadyState.OPEN),
    (ReadyState.CONNECTING, ReadyState.CLOSED),
    (ReadyState.OPEN, ReadyState.CLOSED),
    (ReadyState.CLOSED, ReadyState.CONNECTING),
    # Caller shutdown from any started state
    (ReadyState.CONNECTING, ReadyState.SHUTDOWN),
    (ReadyState.OPEN, ReadyState.SHUTDOWN),
    (ReadyState.CLOSED, ReadyState.SHUTDOWN),
    # Restart after shutdown
    (ReadyState.SHUTDOWN, ReadyState.CONNECTING),
}


class InvalidTransition(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_state: ReadyState, to_state: ReadyState) -> None:
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(f"Invalid transition: {from_state.value} → {to_state.value}")


def validate_transition(from_state: ReadyState, to_state: ReadyState) -> None:
    """Validate a state transition, raising InvalidTransition if not allowed."""
    if (from_state, to_state) not in VALID_TRANSITIONS:
        raise InvalidTransition(from_state, to_state)


def transition(
    current: ReadyState,
    target: ReadyState,
    uri: str,
    trigger: str = "",
) -> ReadyState:
    """Execute a validated state transition, logging the change."""
    validate_transition(current, target)
    log.info(
        "state_transition",
        uri=uri,
        from_state=current.value,
        to_state=target.value,
        trigger=trigger,
    )
    return target
