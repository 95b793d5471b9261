"""Root logging setup for the AgriMonitor service."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, List, Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_MAX_BYTES = 1024 * 1024
LOG_FILE_BACKUPS = 3

# The request middleware already logs every request.
QUIET_LOGGERS = ("aiohttp.access",)

LOG_LEVELS: dict[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

_installed: List[logging.Handler] = []


def coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    try:
        return LOG_LEVELS[level.lower()]
    except KeyError:
        raise ValueError(f"Unknown log level '{level}'") from None


def _build_handlers(console: bool, log_file: Optional[Path], max_bytes: int, backup_count: int) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        )
    return handlers


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    force: bool = False,
    console: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    max_bytes: int = LOG_FILE_MAX_BYTES,
    backup_count: int = LOG_FILE_BACKUPS,
    quiet_loggers: Iterable[str] = QUIET_LOGGERS,
) -> None:
    """Install the service's handlers on the root logger.

    Args:
        level: Level name ("info", "debug", ...) or number.
        force: Replace handlers installed by an earlier call.
        console: Log to stdout.
        log_file: Also log to this file, rotated at ``max_bytes``.
        max_bytes: Rotation size for ``log_file``.
        backup_count: Rotated files kept next to ``log_file``.
        quiet_loggers: Loggers capped at WARNING.
    """
    numeric_level = coerce_level(level)
    root = logging.getLogger()
    root.setLevel(numeric_level)

    if _installed and not force:
        return

    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
    path = Path(log_file) if log_file else None
    for handler in _build_handlers(console, path, max_bytes, backup_count) or [logging.NullHandler()]:
        handler.setFormatter(formatter)
        root.addHandler(handler)
        _installed.append(handler)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["configure_logging", "coerce_level", "LOG_FORMAT", "LOG_DATEFMT", "LOG_LEVELS"]
