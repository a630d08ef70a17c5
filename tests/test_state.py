"""Tests for the ready-state transition table."""

import pytest

from eventsource_client.state import (
    InvalidTransition,
    ReadyState,
    transition,
    validate_transition,
)


class TestValidTransitions:
    def test_raw_to_connecting(self):
        validate_transition(ReadyState.RAW, ReadyState.CONNECTING)

    def test_connecting_to_open(self):
        validate_transition(ReadyState.CONNECTING, ReadyState.OPEN)

    def test_open_to_closed(self):
        validate_transition(ReadyState.OPEN, ReadyState.CLOSED)

    def test_connect_failure(self):
        validate_transition(ReadyState.CONNECTING, ReadyState.CLOSED)

    def test_reconnect(self):
        validate_transition(ReadyState.CLOSED, ReadyState.CONNECTING)

    def test_shutdown_from_started_states(self):
        for state in (ReadyState.CONNECTING, ReadyState.OPEN, ReadyState.CLOSED):
            validate_transition(state, ReadyState.SHUTDOWN)

    def test_restart_after_shutdown(self):
        validate_transition(ReadyState.SHUTDOWN, ReadyState.CONNECTING)


class TestInvalidTransitions:
    def test_raw_to_open(self):
        with pytest.raises(InvalidTransition):
            validate_transition(ReadyState.RAW, ReadyState.OPEN)

    def test_raw_to_shutdown(self):
        with pytest.raises(InvalidTransition):
            validate_transition(ReadyState.RAW, ReadyState.SHUTDOWN)

    def test_shutdown_to_closed(self):
        with pytest.raises(InvalidTransition):
            validate_transition(ReadyState.SHUTDOWN, ReadyState.CLOSED)

    def test_closed_to_open(self):
        with pytest.raises(InvalidTransition):
            validate_transition(ReadyState.CLOSED, ReadyState.OPEN)


class TestTransition:
    def test_returns_new_state(self):
        result = transition(
            ReadyState.RAW,
            ReadyState.CONNECTING,
            uri="http://example.test",
            trigger="connect",
        )
        assert result == ReadyState.CONNECTING

    def test_raises_on_invalid(self):
        with pytest.raises(InvalidTransition) as exc_info:
            transition(ReadyState.OPEN, ReadyState.RAW, uri="http://example.test")
        assert exc_info.value.from_state == ReadyState.OPEN
        assert exc_info.value.to_state == ReadyState.RAW
