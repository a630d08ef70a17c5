"""Entry point: python -m eventsource_client URL"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from .config import EventSourceConfig
from .event_source import EventSource
from .logging_config import setup_logging
from .stream.models import Message


def _parse_header(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected 'Name: value', got {raw!r}")
    return name.strip(), value.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Print Server-Sent Events from a stream as JSON lines")
    parser.add_argument("uri", help="Stream URL")
    parser.add_argument("--retry-delay", type=float, default=None, help="Base reconnect delay in seconds")
    parser.add_argument("--max-retry-delay", type=float, default=None, help="Maximum reconnect delay in seconds")
    parser.add_argument("--last-event-id", default=None, help="Resume from this event id")
    parser.add_argument(
        "--header", type=_parse_header, action="append", default=[],
        help="Extra request header, 'Name: value' (repeatable)",
    )
    parser.add_argument("--log-level", default=None, help="Log level (default: INFO)")
    return parser


def _print_message(event_name: str, message: Message) -> None:
    line = json.dumps({"event": event_name, "id": message.last_event_id, "data": message.data})
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    overrides: dict[str, object] = {"uri": args.uri}
    if args.retry_delay is not None:
        overrides["retry_delay"] = args.retry_delay
    if args.max_retry_delay is not None:
        overrides["max_retry_delay"] = args.max_retry_delay
    if args.last_event_id:
        overrides["last_event_id"] = args.last_event_id
    if args.header:
        overrides["headers"] = dict(args.header)
    if args.log_level:
        overrides["log_level"] = args.log_level

    config = EventSourceConfig(**overrides)
    setup_logging(config.log_level, config.log_dir)

    source = EventSource(config)
    source.on_message(_print_message)

    try:
        asyncio.run(source.start())
    except KeyboardInterrupt:
        source.close()


if __name__ == "__main__":
    main()
