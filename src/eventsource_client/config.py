"""Event source configuration via environment variables (EVENTSOURCE_ prefix) or defaults."""

from __future__ import annotations

from pydantic import model_validator
from pydantic_settings import BaseSettings

from .transport.base import StreamRequest


class EventSourceConfig(BaseSettings):
    uri: str = "http://127.0.0.1:8080/events"
    retry_delay: float = 1.0  # seconds; overridden by the stream's retry field
    max_retry_delay: float = 30.0
    connect_timeout: float | None = 10.0
    read_timeout: float | None = 300.0
    method: str = "GET"
    request_body: str | None = None
    headers: dict[str, str] = {}
    last_event_id: str | None = None
    log_dir: str | None = None
    log_level: str = "INFO"

    model_config = {"env_prefix": "EVENTSOURCE_"}

    @model_validator(mode="after")
    def _check_delays(self) -> EventSourceConfig:
        if self.retry_delay < 0:
            raise ValueError("retry_delay must be non-negative")
        if self.max_retry_delay < self.retry_delay:
            raise ValueError("max_retry_delay must be >= retry_delay")
        return self

    def stream_request(self, last_event_id: str | None = None) -> StreamRequest:
        """Build the request for one connection attempt."""
        return StreamRequest(
            uri=self.uri,
            method=self.method,
            headers=dict(self.headers),
            body=self.request_body,
            last_event_id=last_event_id,
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
        )
