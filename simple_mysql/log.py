import sys
import logging
from pathlib import Path

logger = logging.getLogger("simple_mysql")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(log_dir_path, level=logging.INFO):
    """Attach the ``app.log`` and ``errors.log`` file handlers once."""
    if any(getattr(h, "_simple_mysql", False) for h in logger.handlers):
        return logger

    log_dir = Path(log_dir_path)
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.setLevel(level)

    # Handler for all logs
    all_handler = logging.FileHandler(log_dir / "app.log", encoding="utf-8")
    all_handler.setLevel(level)
    all_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    # Handler for only ERROR and CRITICAL
    error_handler = logging.FileHandler(log_dir / "errors.log", encoding="utf-8")
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    for handler in (all_handler, error_handler):
        handler._simple_mysql = True
        logger.addHandler(handler)

    return logger


def config_console_logger(level=None):
    level = level or logging.INFO

    # Console (stdout) handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    console_handler.setLevel(level)
    logger.addHandler(console_handler)
    if logger.level == logging.NOTSET or logger.level > level:
        logger.setLevel(level)
    return console_handler
