"""JSON structured logging for the audit service."""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "site-audit"

# Per-request INFO lines from the HTTP client would drown the crawl logs.
_CLIENT_LOGGERS = ("httpx", "httpcore")
_SERVER_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")


def build_formatter() -> JsonFormatter:
    """One JSON object per record; ``extra={...}`` keys become top-level fields."""
    return JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        rename_fields={
            "asctime": "timestamp",
            "levelname": "level",
            "name": "logger",
        },
        static_fields={"service": SERVICE_NAME},
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )


def setup_logging(log_level: str = "INFO", stream=None) -> logging.Handler:
    """Send root, uvicorn and HTTP client logs to *stream* (stdout) as JSON.

    Returns the installed handler.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(build_formatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in _CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    for name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.addHandler(handler)
        server_logger.propagate = False

    return handler
