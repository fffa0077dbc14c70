"""Structured logging configuration."""

from __future__ import annotations

import logging
import sys

import structlog

from n8n_provisioner.config import LogFormat


def setup_logging(log_level: str = "INFO", log_format: LogFormat | str = LogFormat.CONSOLE) -> None:
    """Configure structured logging with structlog.

    The console renderer is meant for an operator watching the run; the JSON
    renderer for captured provisioning logs.
    """
    renderer: structlog.types.Processor
    if LogFormat(log_format) == LogFormat.JSON:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    level = getattr(logging, log_level.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
    )
