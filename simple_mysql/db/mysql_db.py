"""Process-wide :class:`Database` built from ``MYSQL_URL``."""

from __future__ import annotations

import atexit
import logging
import os
import threading

from ..config import get_settings
from ..log import setup_logging
from .db_class import Database
from .pool import ConnectionPool

_db: Database | None = None
_shutdown_hook_registered = False
_lock = threading.Lock()

logger = logging.getLogger(__name__)


def has_db_config() -> bool:
    """Return ``True`` when ``MYSQL_URL`` is set."""

    return bool((os.getenv("MYSQL_URL") or "").strip())


def created(log=None) -> Database:
    """Build the shared pool and facade; later calls return the same facade.

    Raises:
        ConfigurationError: When ``MYSQL_URL`` is not defined. Nothing is
            connected in that case.
    """
    global _db

    with _lock:
        if _db is None:
            settings = get_settings()
            setup_logging(settings.log_path, settings.log_level)
            pool = ConnectionPool(settings.options)
            logger.info(
                "event=db_created host=%s db=%s limit=%s",
                settings.options.host,
                settings.options.database,
                settings.options.connection_limit,
            )
            _db = Database(pool, log)
            _ensure_shutdown_hook()
        return _db


def get_db() -> Database:
    """Return the shared :class:`Database`, creating it on first use."""
    if _db is not None:
        return _db
    return created()


def stopped() -> None:
    """Shut the shared :class:`Database` down.

    Registered with ``atexit`` the first time :func:`created` runs, so the pool
    is released when the process exits. Calling it earlier is fine; a later
    :func:`get_db` builds a fresh pool.
    """
    global _db
    with _lock:
        db, _db = _db, None
    if db is not None:
        db.shutdown()


close_cached_db = stopped


def _ensure_shutdown_hook() -> None:
    global _shutdown_hook_registered
    if not _shutdown_hook_registered:
        atexit.register(stopped)
        _shutdown_hook_registered = True


__all__ = [
    "created",
    "stopped",
    "get_db",
    "has_db_config",
    "close_cached_db",
]
