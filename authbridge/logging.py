"""Centralized logging configuration for the authentication bridge.

All log output goes to stderr. stdout is reserved for the key/value report read
by the host application.
"""

import logging
import os
import sys

import structlog

LEVELS = [
    logging.DEBUG,
    logging.INFO,
    logging.WARNING,
    logging.ERROR,
    logging.CRITICAL,
]


def level_from_env(default: str = "WARNING") -> int:
    """Read the base log level from LOG_LEVEL."""
    return getattr(logging, os.getenv("LOG_LEVEL", default).upper(), logging.WARNING)


def adjust_level(base_level: int, verbose: int = 0, quiet: bool = False) -> int:
    """Lower the level one step per -v, or silence everything below CRITICAL."""
    if quiet:
        return logging.CRITICAL
    index = LEVELS.index(base_level) if base_level in LEVELS else LEVELS.index(logging.WARNING)
    return LEVELS[max(index - verbose, 0)]


def configure_logging(log_level: int | None = None) -> None:
    """Configure structured logging for the entire application."""
    if log_level is None:
        log_level = level_from_env()

    if os.getenv("LOG_FORMAT", "json").lower() == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(processor=renderer)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            # Rendering happens in the stdlib formatter
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Keep client library logs at WARNING unless we are debugging
    for logger_name in ["httpx", "httpcore", "ldap3"]:
        logging.getLogger(logger_name).setLevel(max(log_level, logging.WARNING))
