"""
Configuration package.
"""

from .database import (
    close_database_connections,
    create_engine,
    get_async_session_factory,
    get_database_health,
    get_database_url,
    get_session_factory,
)
from .logging import configure_logging, get_logger
from .settings import Settings, settings

__all__ = [
    "settings",
    "Settings",

    # Database
    "get_database_url",
    "create_engine",
    "get_async_session_factory",
    "get_session_factory",
    "get_database_health",
    "close_database_connections",

    # Logging
    "configure_logging",
    "get_logger",
]
