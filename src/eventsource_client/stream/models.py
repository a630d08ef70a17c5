"""Value types produced while reading an SSE stream."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from typing import Any

DEFAULT_EVENT_NAME = "message"


class LineKind(enum.Enum):
    BLANK = "BLANK"
    COMMENT = "COMMENT"
    FIELD = "FIELD"


@dataclass(frozen=True)
class ParsedLine:
    """One classified line of an SSE stream.

    For FIELD lines ``name``/``value`` hold the field; for COMMENT lines
    ``value`` holds the comment text.
    """

    kind: LineKind
    name: str = ""
    value: str = ""


@dataclass(frozen=True)
class Message:
    """A dispatched Server-Sent Event."""

    data: str
    last_event_id: str | None = None
    origin: str = ""

    def json(self) -> Any | None:
        """Decode ``data`` as JSON, or return None if it is not JSON."""
        try:
            return json.loads(self.data) if self.data else None
        except ValueError:
            return None
