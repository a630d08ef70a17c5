"""Tests for configuration."""

import pytest
from pydantic import ValidationError

from eventsource_client.config import EventSourceConfig


class TestEventSourceConfig:
    def test_defaults(self):
        config = EventSourceConfig(uri="http://example.test/stream")
        assert config.retry_delay == 1.0
        assert config.max_retry_delay == 30.0
        assert config.method == "GET"
        assert config.last_event_id is None

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("EVENTSOURCE_URI", "http://env.test/stream")
        monkeypatch.setenv("EVENTSOURCE_RETRY_DELAY", "0.5")
        config = EventSourceConfig()
        assert config.uri == "http://env.test/stream"
        assert config.retry_delay == 0.5

    def test_rejects_max_below_base(self):
        with pytest.raises(ValidationError):
            EventSourceConfig(retry_delay=5.0, max_retry_delay=1.0)

    def test_rejects_negative_delay(self):
        with pytest.raises(ValidationError):
            EventSourceConfig(retry_delay=-1.0)


class TestStreamRequest:
    def test_default_headers(self):
        config = EventSourceConfig(uri="http://example.test/stream")
        headers = config.stream_request().build_headers()
        assert headers["Accept"] == "text/event-stream"
        assert headers["Cache-Control"] == "no-cache"
        assert "Last-Event-ID" not in headers

    def test_resume_header_and_extra_headers(self):
        config = EventSourceConfig(
            uri="http://example.test/stream",
            headers={"Authorization": "Bearer t"},
        )
        request = config.stream_request(last_event_id="17")
        headers = request.build_headers()
        assert headers["Last-Event-ID"] == "17"
        assert headers["Authorization"] == "Bearer t"
        assert request.uri == "http://example.test/stream"
