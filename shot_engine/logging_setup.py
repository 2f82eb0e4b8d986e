"""structlog configuration for the CLI and long-running generation workers."""
from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog

from shot_engine import config


def configure_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """Configure structlog once per process.

    Library code only calls ``structlog.get_logger(__name__)``.  Entry points
    call this to pick the level and renderer.  Events are rendered by
    structlog and written through the stdlib root logger to stderr, so CLI
    stdout stays machine-readable.
    """
    level_name = (level or config.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    as_json = config.LOG_JSON if json_output is None else json_output

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level, force=True)

    renderer = (
        structlog.processors.JSONRenderer()
        if as_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
