"""httpx-backed transport: one streaming request per connection attempt."""

from __future__ import annotations

import httpx
import structlog

from eventsource_client.errors import TransportError

from .base import LineCallback, StateCallback, StreamRequest

log = structlog.get_logger()


def _timeout_for(request: StreamRequest) -> httpx.Timeout:
    return httpx.Timeout(request.read_timeout, connect=request.connect_timeout)


class HttpxTransport:
    """Streams an SSE response with httpx.

    Args:
        http_client: Optional pre-configured client (for testing or shared
            connection pools). It is not closed by the transport. When
            omitted, a client is created per connection attempt.
    """

    def __init__(self, http_client: httpx.AsyncClient | None = None) -> None:
        self.http_client = http_client

    async def stream(
        self,
        request: StreamRequest,
        on_line: LineCallback,
        on_open: StateCallback,
        on_close: StateCallback,
    ) -> None:
        if self.http_client is not None:
            await self._stream_with(self.http_client, request, on_line, on_open, on_close)
            return

        async with httpx.AsyncClient(timeout=_timeout_for(request)) as client:
            await self._stream_with(client, request, on_line, on_open, on_close)

    async def _stream_with(
        self,
        client: httpx.AsyncClient,
        request: StreamRequest,
        on_line: LineCallback,
        on_open: StateCallback,
        on_close: StateCallback,
    ) -> None:
        opened = False
        try:
            async with client.stream(
                request.method,
                request.uri,
                headers=request.build_headers(),
                content=request.body,
                timeout=_timeout_for(request),
            ) as response:
                if not response.is_success:
                    await response.aread()
                    log.error(
                        "stream_rejected",
                        uri=request.uri,
                        status=response.status_code,
                        body=response.text[:500],
                    )
                    raise TransportError(
                        f"Unexpected response status for {request.uri}",
                        status_code=response.status_code,
                    )

                opened = True
                log.debug(
                    "stream_opened",
                    uri=request.uri,
                    status=response.status_code,
                    resume_from=request.last_event_id,
                )
                on_open()

                async for line in response.aiter_lines():
                    on_line(line)

            log.debug("stream_ended", uri=request.uri)
        except httpx.HTTPError as exc:
            raise TransportError(f"Stream failed: {exc}", cause=exc) from exc
        finally:
            if opened:
                on_close()
