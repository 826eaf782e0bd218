"""Row, column and scalar helpers over a pool of PyMySQL connections."""

from .config import ConfigurationError, get_settings
from .db import Database, Session, ConnectionPool, QueryResult, created, stopped, get_db
from .log import logger

__all__ = [
    "ConfigurationError",
    "get_settings",
    "Database",
    "Session",
    "ConnectionPool",
    "QueryResult",
    "created",
    "stopped",
    "get_db",
    "logger",
]
