"""
Logging configuration for the application.
"""

import logging
import sys
from typing import Optional

import structlog

from src.config.settings import settings

# Libraries that are chatty at INFO
NOISY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "asyncio", "httpx", "httpcore")


def configure_logging(level: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
    """
    Configure structlog on top of the stdlib logging module.

    Values bound with ``structlog.contextvars`` (the request id, for one) are
    merged into every event. Production renders JSON lines; other
    environments get the console renderer.
    """
    level = (level or settings.LOG_LEVEL).upper()
    if json_logs is None:
        json_logs = settings.ENVIRONMENT == "production"

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str = None) -> structlog.BoundLogger:
    """Get a structured logger."""
    return structlog.get_logger(name)
