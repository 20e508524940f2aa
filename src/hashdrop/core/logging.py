from __future__ import annotations

"""Central logging utilities.

A single file-backed log that never crashes the app. Failed downloads point
the user here, so every error dialog has a matching traceback in this file.
"""

import logging
from pathlib import Path

from hashdrop.core.paths import app_data_dir


def log_path() -> Path:
    return app_data_dir() / "app.log"


def get_logger(name: str = "hashdrop") -> logging.Logger:
    return logging.getLogger(name)
