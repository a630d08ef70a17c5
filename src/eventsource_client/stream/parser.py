"""Line classifier for the SSE text protocol.

Each line received from the stream is exactly one of:

    ""                -> BLANK    (dispatches the pending event)
    ": text"          -> COMMENT
    "name: value"     -> FIELD(name, value)
    "name"            -> FIELD(name, "")
"""

from __future__ import annotations

import re

from .models import LineKind, ParsedLine

DATA_FIELD = "data"
ID_FIELD = "id"
EVENT_FIELD = "event"
RETRY_FIELD = "retry"

_INT64_MAX = 2**63 - 1
_DIGITS = re.compile(r"[0-9]+")

_BLANK = ParsedLine(LineKind.BLANK)


def _strip_leading_space(value: str) -> str:
    if value.startswith(" "):
        return value[1:]
    return value


def classify_line(line: str) -> ParsedLine:
    """Classify a single raw line from the stream."""
    line = line.rstrip("\r\n")

    if not line.strip():
        return _BLANK

    if line.startswith(":"):
        return ParsedLine(LineKind.COMMENT, value=_strip_leading_space(line[1:]))

    if ":" in line:
        name, _, value = line.partition(":")
        return ParsedLine(LineKind.FIELD, name=name.strip(), value=_strip_leading_space(value))

    return ParsedLine(LineKind.FIELD, name=line.strip())


def parse_retry(value: str) -> int | None:
    """Return the retry value in milliseconds, or None if it is not a valid int64."""
    if not _DIGITS.fullmatch(value):
        return None
    retry = int(value)
    if retry > _INT64_MAX:
        return None
    return retry
