"""EventSource: the connection lifecycle state machine.

Drives the reconnect loop: waits with backoff between attempts, opens the
stream through the transport, feeds every line to the dispatcher, and
raises open / closed / message / comment / error notifications.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import structlog

from .backoff import DecorrelatedJitterBackoff
from .cancellation import CancellationToken, TokenSlot
from .config import EventSourceConfig
from .errors import InvalidStateError, TransportCancelled
from .state import ACTIVE_STATES, ReadyState, transition
from .stream.dispatcher import EventDispatcher
from .stream.models import Message
from .transport.base import Transport
from .transport.httpx_transport import HttpxTransport

log = structlog.get_logger()

StateHandler = Callable[[ReadyState], None]
MessageHandler = Callable[[str, Message], None]
CommentHandler = Callable[[str], None]
ErrorHandler = Callable[[Exception], None]


class EventSource:
    """Server-Sent Events client with automatic reconnection.

    Handlers run synchronously on the reconnect loop, in registration
    order. A handler that blocks stalls the stream.

    Args:
        config: Stream URI, retry delays, timeouts and request options.
        transport: Opens the HTTP stream. Defaults to HttpxTransport().
        logger: Optional structlog logger; defaults to one bound to the URI.
        backoff: Optional backoff policy (for testing with a seeded RNG).
    """

    def __init__(
        self,
        config: EventSourceConfig,
        transport: Transport | None = None,
        logger: Any | None = None,
        backoff: DecorrelatedJitterBackoff | None = None,
    ) -> None:
        self.config = config
        self._log = logger if logger is not None else log.bind(uri=config.uri)
        self._transport: Transport = transport if transport is not None else HttpxTransport()

        self._state = ReadyState.RAW
        self._retry_delay = config.retry_delay
        self._backoff = backoff or DecorrelatedJitterBackoff(
            config.retry_delay, config.max_retry_delay,
        )
        self._backoff_delay = 0.0
        self._tokens = TokenSlot()

        self._dispatcher = EventDispatcher(
            origin=config.uri,
            on_message=self._message_dispatched,
            on_comment=self._comment_received,
            on_retry=self._retry_received,
            last_event_id=config.last_event_id,
        )

        self._open_handlers: list[StateHandler] = []
        self._closed_handlers: list[StateHandler] = []
        self._message_handlers: list[MessageHandler] = []
        self._comment_handlers: list[CommentHandler] = []
        self._error_handlers: list[ErrorHandler] = []

    # -- Public surface --------------------------------------------------

    @property
    def state(self) -> ReadyState:
        return self._state

    @property
    def last_event_id(self) -> str | None:
        return self._dispatcher.last_event_id

    @property
    def retry_delay(self) -> float:
        """Base reconnect delay in seconds (updated by the stream's retry field)."""
        return self._retry_delay

    @property
    def backoff_delay(self) -> float:
        """The most recent wait before a reconnect, in seconds."""
        return self._backoff_delay

    @property
    def backoff(self) -> DecorrelatedJitterBackoff:
        return self._backoff

    def on_open(self, handler: StateHandler) -> None:
        self._open_handlers.append(handler)

    def on_closed(self, handler: StateHandler) -> None:
        self._closed_handlers.append(handler)

    def on_message(self, handler: MessageHandler) -> None:
        """Register a handler called with (event_name, message) per dispatched event."""
        self._message_handlers.append(handler)

    def on_comment(self, handler: CommentHandler) -> None:
        self._comment_handlers.append(handler)

    def on_error(self, handler: ErrorHandler) -> None:
        self._error_handlers.append(handler)

    async def start(self) -> None:
        """Run the reconnect loop until close() is called or retries are ended.

        Raises:
            InvalidStateError: the source is already connecting or open.
        """
        if self._state in ACTIVE_STATES:
            raise InvalidStateError(self._state)

        token = self._tokens.current
        while not token.cancelled:
            if not await self._maybe_wait_with_backoff(token):
                break
            try:
                await self._connect(token)
                self._backoff.reset()
            except InvalidStateError:
                raise
            except Exception as exc:
                self._log.error("connect_error", error=str(exc), error_type=type(exc).__name__)
                self._log.debug("connect_error_detail", exc_info=exc)

        self._log.debug("reconnect_loop_stopped", state=self._state.value)

    def close(self) -> None:
        """Shut the source down. Idempotent; a later start() runs a fresh loop."""
        if self._state in (ReadyState.RAW, ReadyState.SHUTDOWN):
            return

        self._set_state(ReadyState.SHUTDOWN, self._closed_handlers, trigger="close")

        # Cancel the in-flight request and the retry loop.
        self._tokens.swap_and_cancel()

    # -- Reconnect loop --------------------------------------------------

    async def _maybe_wait_with_backoff(self, token: CancellationToken) -> bool:
        """Wait before a reconnect if needed. Returns False if cancelled while waiting."""
        if self._backoff.attempt_count > 0 and self._retry_delay > 0:
            delay = self._backoff.next_delay()
            self._backoff_delay = delay
            self._log.info(
                "reconnect_wait",
                delay_ms=round(delay * 1000),
                attempt=self._backoff.attempt_count,
            )
            return await token.sleep(delay)

        self._backoff.record_attempt()
        return True

    async def _connect(self, token: CancellationToken) -> None:
        if self._state in ACTIVE_STATES:
            raise InvalidStateError(self._state)

        self._set_state(ReadyState.CONNECTING, trigger="connect")

        # Callbacks from an attempt whose token was swapped out must not
        # touch the state or dispatcher of a newer attempt.
        def on_line(line: str) -> None:
            if not token.cancelled:
                self._dispatcher.process_line(line)

        def on_open() -> None:
            if not token.cancelled:
                self._transport_opened()

        def on_close() -> None:
            if not token.cancelled:
                self._transport_closed()

        try:
            self._dispatcher.clear_pending()
            request = self.config.stream_request(self._dispatcher.last_event_id)
            await token.run(self._transport.stream(request, on_line, on_open, on_close))
        except asyncio.CancelledError:
            if self._state in ACTIVE_STATES and not token.cancelled:
                self._set_state(ReadyState.CLOSED, self._closed_handlers, trigger="task_cancelled")
            raise
        except TransportCancelled as exc:
            if token.cancelled:
                # Token was swapped out by close(); nothing to report.
                self._log.debug("stream_cancelled_by_close")
                return
            self._tokens.swap_and_cancel()
            self._close_and_raise_error(exc)
            return
        except Exception as exc:
            # If the caller called close(), state is SHUTDOWN. Don't rethrow.
            if self._state is not ReadyState.SHUTDOWN and not token.cancelled:
                self._close_and_raise_error(exc)
                raise
            return

        if self._state is not ReadyState.SHUTDOWN and not token.cancelled:
            self._set_state(ReadyState.CLOSED, self._closed_handlers, trigger="stream_end")

    def _close_and_raise_error(self, exc: Exception) -> None:
        self._set_state(ReadyState.CLOSED, self._closed_handlers, trigger="error")
        self._notify(self._error_handlers, exc)

    # -- Transport / dispatcher callbacks --------------------------------

    def _transport_opened(self) -> None:
        if self._state is ReadyState.SHUTDOWN:
            return
        self._backoff.reset()
        self._set_state(ReadyState.OPEN, self._open_handlers, trigger="transport_open")

    def _transport_closed(self) -> None:
        if self._state is ReadyState.SHUTDOWN:
            return
        self._set_state(ReadyState.CLOSED, self._closed_handlers, trigger="transport_close")

    def _message_dispatched(self, event_name: str, message: Message) -> None:
        self._notify(self._message_handlers, event_name, message)

    def _comment_received(self, comment: str) -> None:
        self._notify(self._comment_handlers, comment)

    def _retry_received(self, retry_ms: int) -> None:
        self._retry_delay = retry_ms / 1000
        self._backoff.base_delay = self._retry_delay
        self._log.info("retry_delay_updated", retry_ms=retry_ms)

    # -- Helpers ---------------------------------------------------------

    def _set_state(
        self,
        state: ReadyState,
        handlers: list[StateHandler] | None = None,
        trigger: str = "",
    ) -> None:
        if self._state is state:
            return
        self._state = transition(self._state, state, self.config.uri, trigger)
        if handlers is not None:
            self._notify(handlers, state)

    def _notify(self, handlers: list[Any], *args: Any) -> None:
        for handler in list(handlers):
            try:
                handler(*args)
            except Exception:
                self._log.exception(
                    "handler_error",
                    handler=getattr(handler, "__qualname__", repr(handler)),
                )
