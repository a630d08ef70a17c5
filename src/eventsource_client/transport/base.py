"""Transport contract consumed by EventSource.

A transport opens one HTTP stream, reports when it is open, hands every
received line to ``on_line`` and reports when it closes. Cancellation is
applied from the outside through the source's CancellationToken.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Protocol

LineCallback = Callable[[str], None]
StateCallback = Callable[[], None]


@dataclass(frozen=True)
class StreamRequest:
    """Everything a transport needs for one connection attempt."""

    uri: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None
    last_event_id: str | None = None
    connect_timeout: float | None = 10.0
    read_timeout: float | None = 300.0

    def build_headers(self) -> dict[str, str]:
        """Request headers including the SSE defaults and the resume id."""
        headers = {
            "Accept": "text/event-stream",
            "Cache-Control": "no-cache",
        }
        headers.update(self.headers)
        if self.last_event_id:
            headers["Last-Event-ID"] = self.last_event_id
        return headers


class Transport(Protocol):
    async def stream(
        self,
        request: StreamRequest,
        on_line: LineCallback,
        on_open: StateCallback,
        on_close: StateCallback,
    ) -> None:
        """Stream lines until the server ends the response.

        Raises:
            TransportError: on connect/read failures and non-2xx responses.
        """
        ...
