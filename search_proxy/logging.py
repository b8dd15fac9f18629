"""Structured logging for the proxy.

Every event is a single JSON line tagged with ``service``. Handlers bind
per-request fields with :func:`structlog.contextvars.bind_contextvars`, which
are merged into each event emitted while the request is in flight.
"""

from __future__ import annotations

import logging

import structlog

SERVICE_NAME = "search-proxy"


def configure_logging(level: int | str = logging.INFO) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    # uvicorn's own access/error loggers go through the stdlib root logger.
    logging.basicConfig(level=level, format="%(message)s", handlers=[logging.StreamHandler()])
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="ts"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger(service=SERVICE_NAME)

__all__ = ["SERVICE_NAME", "configure_logging", "logger"]
