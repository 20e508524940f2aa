from __future__ import annotations

import locale
import platform
import sys
import uuid
from dataclasses import dataclass

from hashdrop.core.logging import get_logger
from hashdrop.core.paths import is_frozen_exe


@dataclass(frozen=True)
class ErrorId:
    """Short user-facing error identifier for correlating dialogs with logs."""

    area: str
    token: str

    def __str__(self) -> str:
        return f"{self.area}-{self.token}"


def new_error_id(area: str) -> ErrorId:
    area = (area or "GEN").upper()
    token = uuid.uuid4().hex[:6].upper()
    return ErrorId(area=area, token=token)


def log_startup_snapshot() -> None:
    """Log a one-shot environment snapshot useful for field debugging."""

    log = get_logger("hashdrop.startup")
    try:
        from hashdrop import __version__
    except Exception:
        __version__ = "unknown"

    try:
        loc = locale.getlocale()
        loc_s = f"{loc[0] or ''} {loc[1] or ''}".strip()
    except Exception:
        loc_s = ""

    try:
        import PySide6
        from PySide6 import QtCore

        pyside_v = getattr(PySide6, "__version__", "")
        qt_v = getattr(QtCore, "qVersion", lambda: "")()
    except Exception:
        pyside_v = ""
        qt_v = ""

    log.info("=== App startup ===")
    log.info("app_version=%s", __version__)
    log.info("mode=%s", "standalone_exe" if is_frozen_exe() else "source")
    log.info("python=%s", sys.version.split()[0])
    log.info("os=%s %s", platform.system(), platform.release())
    log.info("arch=%s", platform.machine())
    if loc_s:
        log.info("locale=%s", loc_s)
    if pyside_v:
        log.info("pyside6=%s", pyside_v)
    if qt_v:
        log.info("qt=%s", qt_v)


def log_exception_with_id(area: str, exc: BaseException, *, logger_name: str = "hashdrop") -> ErrorId:
    """Log an exception and return a stable error id to show the user."""

    err_id = new_error_id(area)
    log = get_logger(logger_name)
    # exc_info carries the traceback and the chained cause.
    log.error("Error-ID=%s", str(err_id), exc_info=exc)
    return err_id
