from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager, nullcontext
from typing import Any, Iterable, Iterator, List, Mapping, Optional

from .placeholders import compile_named, placeholder_names
from .pool import ConnectionPool, PoolError, QueryResult


logger = logging.getLogger(__name__)

FOUND_ROWS_SQL = "SELECT FOUND_ROWS()"


class _Accessors(ABC):
    """Result-shaping helpers shared by :class:`Database` and :class:`Session`."""

    def __init__(self, pool: ConnectionPool, log: Any = None):
        self._pool = pool
        self._logger = log or logger

    @abstractmethod
    def _connection_scope(self):
        """Context manager yielding the connection a statement runs on."""

    def _prepare(self, sql: str, params: Any):
        if self._pool.named_placeholders and (params is None or isinstance(params, Mapping)):
            return compile_named(sql, params)
        return sql, params or None

    # ------------------------------------------------------------------
    # Raw statements
    # ------------------------------------------------------------------
    def format(self, sql: str, params: Any = None) -> str:
        """Return ``sql`` with ``params`` substituted; nothing is sent to the server."""
        return self._pool.format(*self._prepare(sql, params))

    emu = format

    def execute(self, sql: str, params: Any = None) -> QueryResult:
        """Run one statement; driver errors propagate unchanged."""
        self._logger.debug("event=db_query sql=%s params=%s", sql, params or {})
        query, args = self._prepare(sql, params)
        with self._connection_scope() as connection:
            return self._pool.query(query, args, connection)

    query = execute

    def execute_many(self, sql: str, params_seq: Iterable[Any], batch_size: int = 1000) -> int:
        """Bulk-execute ``sql`` in batches on one connection; return the summed rowcount."""
        params_list = list(params_seq)
        if not params_list:
            return 0

        self._logger.debug("event=db_execute_many sql=%s count=%s", sql, len(params_list))
        if self._pool.named_placeholders and isinstance(params_list[0], Mapping):
            query, _ = compile_named(sql)
            names = placeholder_names(sql)
            params_list = [{name: item.get(name) for name in names} for item in params_list]
        else:
            query = sql

        total = 0
        with self._connection_scope() as connection:
            for index in range(0, len(params_list), batch_size):
                total += self._pool.query_many(query, params_list[index : index + batch_size], connection)
        return total

    # ------------------------------------------------------------------
    # Shaped results
    # ------------------------------------------------------------------
    def rows(self, sql: str, params: Any = None) -> List[dict]:
        """Fetch all rows as dicts; ``[]`` when nothing matched."""
        result = self.execute(sql, params)
        if not result:
            return []
        return result.rows

    def row(self, sql: str, params: Any = None) -> dict:
        """Fetch the first row; ``{}`` when nothing matched."""
        rows = self.rows(sql, params)
        if not rows:
            return {}
        return rows[0]

    def col(self, sql: str, params: Any = None) -> list:
        """Fetch the first column of every row."""
        rows = self.rows(sql, params)
        if not rows:
            return []
        key = next(iter(rows[0]))
        return [item[key] for item in rows]

    def val(self, sql: str, params: Any = None) -> Any:
        """Fetch the first column of the first row, or ``None``."""
        row = self.row(sql, params)
        if not row:
            return None
        return row[next(iter(row))]

    def total(self) -> int:
        """Return ``FOUND_ROWS()`` for the preceding ``SQL_CALC_FOUND_ROWS`` query."""
        return int(self.val(FOUND_ROWS_SQL) or 0)

    def insert(self, sql: str, params: Any = None) -> int:
        """Run a write and return the server-assigned ``AUTO_INCREMENT`` id."""
        return int(self.execute(sql, params).lastrowid)


class Session(_Accessors):
    """Accessors bound to one pooled connection.

    Use it when statements depend on connection state, for example
    ``SQL_CALC_FOUND_ROWS`` followed by :meth:`total`. Valid only inside
    :meth:`Database.session`.
    """

    def __init__(self, pool: ConnectionPool, connection, log: Any = None):
        super().__init__(pool, log)
        self._connection = connection

    @property
    def active(self) -> bool:
        return self._connection is not None

    def _connection_scope(self):
        if self._connection is None:
            raise PoolError("Session is closed")
        return nullcontext(self._connection)

    def _detach(self) -> None:
        self._connection = None


class Database(_Accessors):
    """Convenience wrapper around a :class:`ConnectionPool`.

    Every call checks a connection out of the pool and returns it afterwards.
    Read helpers never raise for an empty result: they return ``[]``, ``{}``
    or ``None``. Errors raised by PyMySQL reach the caller untouched.

    :meth:`total` here may run on a different connection than the query it
    is meant to count. Run both inside :meth:`session` when that matters.
    """

    def __init__(self, pool: ConnectionPool, log: Any = None):
        super().__init__(pool, log)
        self._logger.debug("event=db_connect host=%s db=%s", pool.options.host, pool.options.database)

    @classmethod
    def from_url(cls, url: str, log: Any = None) -> "Database":
        return cls(ConnectionPool.from_url(url), log)

    def provider(self) -> ConnectionPool:
        return self._pool

    def _connection_scope(self):
        return self._pool.acquire()

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Pin one pooled connection; it goes back to the pool on exit."""
        with self._pool.acquire() as connection:
            session = Session(self._pool, connection, self._logger)
            try:
                yield session
            finally:
                session._detach()

    def shutdown(self) -> None:
        if self._pool.closed:
            return
        self._pool.end()
        self._logger.debug("event=db_disconnect")

    end = shutdown
    close = shutdown

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.shutdown()
        return None
