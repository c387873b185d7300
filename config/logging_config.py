"""Logging setup: console output plus rotating log files."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from config.settings import Settings, get_settings

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAIN_LOG_NAME = "novelstore.log"
STORAGE_LOG_NAME = "storage.log"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        str(path), maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _drop_handlers(logger: logging.Logger):
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def setup_logging(
    level: Optional[int | str] = None,
    log_dir: Optional[str | Path] = None,
    console_enabled: bool = True,
    settings: Optional[Settings] = None,
) -> None:
    """Configure the root logger and the storage audit log.

    Args:
        level: Logging level, as a number or a name such as "DEBUG".
            Defaults to ``Settings.log_level``.
        log_dir: Directory for log files. Defaults to ``Settings.log_dir``.
        console_enabled: Whether to also log to stderr.
        settings: Settings to take defaults from; the cached instance
            when omitted.

    ``storage.log`` receives every record from the ``storage`` package at
    DEBUG, so file writes and index repairs can be traced without raising
    the root level. Calling this again replaces all handlers it installed.
    """
    if level is None or log_dir is None:
        settings = settings or get_settings()
        level = settings.log_level if level is None else level
        log_dir = settings.log_dir if log_dir is None else log_dir
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    _drop_handlers(root_logger)

    if console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)
    root_logger.addHandler(_rotating_handler(log_dir / MAIN_LOG_NAME, level, formatter))

    storage_logger = logging.getLogger("storage")
    storage_logger.setLevel(logging.DEBUG)
    _drop_handlers(storage_logger)
    storage_logger.addHandler(_rotating_handler(log_dir / STORAGE_LOG_NAME, logging.DEBUG, formatter))

    logging.getLogger(__name__).debug("Logging initialized: level=%s, dir=%s", level, log_dir)
