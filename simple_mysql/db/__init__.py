
from .db_class import Database, Session, FOUND_ROWS_SQL
from .pool import ConnectionPool, QueryResult, PoolError, PoolClosedError
from .mysql_db import created, stopped, get_db, close_cached_db, has_db_config

__all__ = [
    "Database",
    "Session",
    "FOUND_ROWS_SQL",
    "ConnectionPool",
    "QueryResult",
    "PoolError",
    "PoolClosedError",
    "created",
    "stopped",
    "get_db",
    "close_cached_db",
    "has_db_config",
]
