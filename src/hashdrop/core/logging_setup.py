from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from hashdrop.core.debug_support import new_error_id
from hashdrop.core.logging import log_path

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
MAX_BYTES = 2 * 1024 * 1024
BACKUPS = 3


def resolve_level(level: Union[int, str, None]) -> int:
    """Accept 10 / "debug" / "INFO"; anything unknown means INFO."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level or "INFO").upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: Union[int, str, None] = "INFO", path: Optional[Path] = None) -> Optional[Path]:
    """Send every ``hashdrop.*`` record to a rotating file.

    Returns the log file, or None when it cannot be opened (read-only home):
    the app then runs without a file log rather than not at all.
    """
    p = path or log_path()
    logger = logging.getLogger("hashdrop")
    logger.setLevel(resolve_level(level))

    for h in logger.handlers:
        if isinstance(h, RotatingFileHandler) and h.baseFilename == os.path.abspath(p):
            return p

    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(p, maxBytes=MAX_BYTES, backupCount=BACKUPS, encoding="utf-8")
    except OSError as e:
        print(f"hashdrop: file logging disabled ({e})", file=sys.stderr)
        return None
    fh.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(fh)
    return p


def qt_message_handler(mode, context, message: str) -> None:
    from PySide6.QtCore import QtMsgType

    levels = {
        QtMsgType.QtDebugMsg: logging.DEBUG,
        QtMsgType.QtInfoMsg: logging.INFO,
        QtMsgType.QtWarningMsg: logging.WARNING,
        QtMsgType.QtCriticalMsg: logging.ERROR,
        QtMsgType.QtFatalMsg: logging.CRITICAL,
    }
    logging.getLogger("hashdrop.qt").log(levels.get(mode, logging.WARNING), "%s", message)


def route_qt_messages() -> None:
    """Qt warnings (tray, dialogs, threads) go to the app log, not stderr."""
    from PySide6.QtCore import qInstallMessageHandler

    qInstallMessageHandler(qt_message_handler)


def install_excepthook() -> None:
    """Log uncaught exceptions with an error id.

    Anything escaping a Qt slot lands here, e.g. a download whose target
    subdirectory could not be created.
    """

    def _hook(exc_type, exc, tb):
        if not issubclass(exc_type, KeyboardInterrupt):
            err_id = new_error_id("CRASH")
            logging.getLogger("hashdrop").error("Uncaught exception, Error-ID=%s", err_id, exc_info=(exc_type, exc, tb))
        sys.__excepthook__(exc_type, exc, tb)

    sys.excepthook = _hook
