"""Structured logging via structlog, to stderr and optionally an hourly rotating file."""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler

import structlog


def setup_logging(log_level: str = "INFO", log_dir: str | None = None) -> None:
    """Configure structlog with JSON lines on stderr (+ a rotating file if log_dir is set)."""
    log_level = log_level.upper()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        # File handler: hourly rotation, JSON lines
        handlers.append(
            TimedRotatingFileHandler(
                filename=os.path.join(log_dir, "eventsource.jsonl"),
                when="H",
                interval=1,
                backupCount=168,  # 7 days of hourly logs
                utc=True,
            )
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(log_level)
        ),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
