"""Event buffer: accumulates classified fields and dispatches complete messages."""

from __future__ import annotations

from typing import Callable

import structlog

from .models import DEFAULT_EVENT_NAME, LineKind, Message, ParsedLine
from .parser import (
    DATA_FIELD,
    EVENT_FIELD,
    ID_FIELD,
    RETRY_FIELD,
    classify_line,
    parse_retry,
)

log = structlog.get_logger()

MessageCallback = Callable[[str, Message], None]
CommentCallback = Callable[[str], None]
RetryCallback = Callable[[int], None]


class EventDispatcher:
    """Turns a stream of lines into Message notifications.

    A blank line terminates the pending event. The last event id persists
    across dispatches (and reconnects); the event name applies to the next
    dispatch only.
    """

    def __init__(
        self,
        origin: str,
        on_message: MessageCallback,
        on_comment: CommentCallback | None = None,
        on_retry: RetryCallback | None = None,
        last_event_id: str | None = None,
    ) -> None:
        self.origin = origin
        self._on_message = on_message
        self._on_comment = on_comment
        self._on_retry = on_retry

        self._data: list[str] = []
        self._event_name = DEFAULT_EVENT_NAME
        self._last_event_id = last_event_id

    @property
    def last_event_id(self) -> str | None:
        return self._last_event_id

    @property
    def event_name(self) -> str:
        return self._event_name

    @property
    def pending_data(self) -> list[str]:
        return list(self._data)

    def process_line(self, line: str) -> None:
        """Classify one raw line and apply it to the pending event."""
        self.process(classify_line(line))

    def process(self, parsed: ParsedLine) -> None:
        if parsed.kind is LineKind.BLANK:
            self.dispatch()
        elif parsed.kind is LineKind.COMMENT:
            if self._on_comment is not None:
                self._on_comment(parsed.value)
        else:
            self._process_field(parsed.name, parsed.value)

    def _process_field(self, name: str, value: str) -> None:
        if name == DATA_FIELD:
            self._data.append(value)
        elif name == ID_FIELD:
            self._last_event_id = value
        elif name == EVENT_FIELD:
            self._event_name = value
        elif name == RETRY_FIELD:
            retry = parse_retry(value)
            if retry is None:
                log.debug("retry_field_ignored", value=value[:32])
                return
            if self._on_retry is not None:
                self._on_retry(retry)

    def dispatch(self) -> Message | None:
        """Emit the pending event, if it has any data."""
        if not self._data:
            return None

        message = Message(
            data="\n".join(self._data),
            last_event_id=self._last_event_id,
            origin=self.origin,
        )
        event_name = self._event_name
        self.clear_pending()
        self._on_message(event_name, message)
        return message

    def clear_pending(self) -> None:
        """Drop buffered data and the pending event name; keep the last event id."""
        self._data = []
        self._event_name = DEFAULT_EVENT_NAME
