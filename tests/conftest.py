import sys
from pathlib import Path
from unittest.mock import MagicMock

import pymysql
import pytest

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from simple_mysql.config import ConnectionOptions, get_settings  # noqa: E402
from simple_mysql.db import mysql_db  # noqa: E402
from simple_mysql.db.db_class import Database  # noqa: E402
from simple_mysql.db.pool import ConnectionPool  # noqa: E402
from simple_mysql.log import logger as package_logger  # noqa: E402

TEST_DB_PASSWORD = "password"  # noqa: S105


def make_connection():
    """MagicMock PyMySQL connection with a single reusable cursor."""
    cursor = MagicMock()
    cursor.description = None
    cursor.fetchall.return_value = []
    cursor.rowcount = 0
    cursor.lastrowid = 0

    connection = MagicMock()
    connection.cursor.return_value = cursor
    connection.ping.return_value = None
    return connection


def set_result(cursor, rows, columns=None):
    """Prime ``cursor`` to answer a SELECT with ``rows``."""
    if columns is None:
        columns = list(rows[0]) if rows else []
    cursor.description = tuple((name, None, None, None, None, None, None) for name in columns)
    cursor.fetchall.return_value = [dict(row) for row in rows]
    cursor.rowcount = len(rows)


@pytest.fixture
def options():
    return ConnectionOptions(
        host="localhost",
        port=3306,
        user="user",
        password=TEST_DB_PASSWORD,
        database="database",
        connection_limit=2,
        wait_for_connections=False,
        named_placeholders=True,
    )


@pytest.fixture
def connection():
    return make_connection()


@pytest.fixture
def connect(monkeypatch, connection):
    """Replace ``pymysql.connect``; every new pooled connection is ``connection``."""
    connect = MagicMock(return_value=connection)
    monkeypatch.setattr(pymysql, "connect", connect)
    return connect


@pytest.fixture
def pool(options, connect):
    return ConnectionPool(options)


@pytest.fixture
def db(pool):
    return Database(pool, MagicMock())


@pytest.fixture
def cursor(connection):
    return connection.cursor.return_value


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    monkeypatch.delenv("MYSQL_URL", raising=False)
    monkeypatch.setenv("LOG_PATH", str(tmp_path / "logs"))
    get_settings.cache_clear()
    handlers = list(package_logger.handlers)
    yield monkeypatch
    mysql_db.stopped()
    get_settings.cache_clear()
    for handler in package_logger.handlers:
        if handler not in handlers:
            handler.close()
    package_logger.handlers[:] = handlers


@pytest.fixture
def mysql_error():
    return pymysql.err.ProgrammingError(1064, "You have an error in your SQL syntax")
