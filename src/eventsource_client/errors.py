"""Exceptions raised by the event source and its transports."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .state import ReadyState


class EventSourceError(Exception):
    """Base exception for all event source failures."""


class InvalidStateError(EventSourceError):
    """Raised when start() is called on a source that is already connecting or open."""

    def __init__(self, state: ReadyState) -> None:
        self.state = state
        super().__init__(f"Event source already started (state: {state.value})")


class TransportCancelled(EventSourceError):
    """Raised when an in-flight transport operation was aborted by its cancellation token."""


class TransportError(EventSourceError):
    """Raised for transport-level failures: connect errors, read errors, non-2xx responses."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.cause = cause

    def __str__(self) -> str:
        if self.status_code is None:
            return str(self.args[0])
        return f"{self.status_code}: {self.args[0]}"
