"""Structured logging configuration.

stdout carries the MCP JSON-RPC stream, so every log line goes to stderr.
"""

from __future__ import annotations

import logging
import sys

import structlog

log_level_map = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """Route stdlib logging and structlog to stderr at ``level``."""
    log_level = log_level_map.get(level.upper(), logging.INFO)

    logging.basicConfig(level=log_level, stream=sys.stderr, format="%(message)s", force=True)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
