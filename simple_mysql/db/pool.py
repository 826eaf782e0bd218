from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Mapping

import pymysql
from dbutils.pooled_db import PooledDB
from pymysql.converters import escape_item

from ..config import ConnectionOptions, parse_mysql_url


logger = logging.getLogger(__name__)


class PoolError(Exception):
    """Base class for connection pool failures."""


class PoolClosedError(PoolError):
    """Raised when a connection is requested after :meth:`ConnectionPool.end`."""


@dataclass
class QueryResult:
    """Driver result of one statement: rows for reads, counters for writes."""

    rows: List[dict] = field(default_factory=list)
    columns: List[str] = field(default_factory=list)
    rowcount: int = 0
    lastrowid: int = 0

    def __bool__(self) -> bool:
        return bool(self.columns) or self.rowcount > 0


class ConnectionPool:
    """PyMySQL connections pooled by DBUtils' :class:`PooledDB`.

    Connections are opened lazily, pinged when checked out and reopened by
    DBUtils when the server went away. Without ``waitForConnections`` a caller
    over ``connectionLimit`` gets ``dbutils.pooled_db.TooManyConnections``.
    """

    def __init__(self, options: ConnectionOptions, *, creator: Any = pymysql):
        self.options = options
        self._closed = False
        self._lock = threading.Lock()
        self._pool = PooledDB(
            creator,
            maxconnections=options.connection_limit,
            blocking=options.wait_for_connections,
            ping=1,
            cursorclass=pymysql.cursors.DictCursor,
            **options.connect_kwargs(),
        )

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "ConnectionPool":
        return cls(parse_mysql_url(url), **kwargs)

    @property
    def named_placeholders(self) -> bool:
        return self.options.named_placeholders

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    @contextmanager
    def acquire(self) -> Iterator[Any]:
        """Check a connection out for the duration of the ``with`` block."""
        if self.closed:
            raise PoolClosedError("Connection pool is closed")
        connection = self._pool.connection()
        try:
            yield connection
        finally:
            connection.close()
            if self.closed:
                # returned after end(); drop it instead of keeping it idle
                self._pool.close()

    def format(self, sql: str, params: Any = None) -> str:
        """Render ``sql`` with escaped ``params``; no connection is used."""
        if params is None:
            return sql
        charset = self.options.charset
        if isinstance(params, Mapping):
            return sql % {key: escape_item(value, charset) for key, value in params.items()}
        return sql % tuple(escape_item(value, charset) for value in params)

    def query(self, sql: str, params: Any = None, connection=None) -> QueryResult:
        if connection is None:
            with self.acquire() as connection:
                return self.query(sql, params, connection)
        cursor = connection.cursor()
        try:
            cursor.execute(sql, params)
            if cursor.description:
                columns = [column[0] for column in cursor.description]
                rows = list(cursor.fetchall())
            else:
                columns, rows = [], []
            return QueryResult(
                rows=rows,
                columns=columns,
                rowcount=cursor.rowcount,
                lastrowid=cursor.lastrowid or 0,
            )
        finally:
            cursor.close()

    def query_many(self, sql: str, params_list: List[Any], connection) -> int:
        cursor = connection.cursor()
        try:
            cursor.executemany(sql, params_list)
            return cursor.rowcount
        finally:
            cursor.close()

    def end(self) -> None:
        """Close idle connections; checked-out ones close when released."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._pool.close()
        logger.debug("event=db_pool_end host=%s", self.options.host)
