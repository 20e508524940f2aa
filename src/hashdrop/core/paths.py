from __future__ import annotations

import os
import sys
from pathlib import Path


def app_data_dir() -> Path:
    """Per-user app data directory used for logs and config."""

    override = os.environ.get("HASHDROP_HOME")
    base = Path(override) if override else Path.home() / ".hashdrop"
    base.mkdir(parents=True, exist_ok=True)
    return base


def is_frozen_exe() -> bool:
    return bool(getattr(sys, "frozen", False))
