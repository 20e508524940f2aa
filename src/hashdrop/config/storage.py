from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from hashdrop.core.logging import get_logger
from hashdrop.core.paths import app_data_dir

DOWNLOAD_HASH_SHORTCUT = "download_hash_shortcut"
HOTKEY = "hotkey"
IPFS_API_URL = "ipfs_api_url"
LOG_LEVEL = "log_level"

DEFAULTS: Dict[str, Any] = {
    DOWNLOAD_HASH_SHORTCUT: False,
    HOTKEY: "ctrl+alt+d",
    IPFS_API_URL: "http://127.0.0.1:5001",
    LOG_LEVEL: "INFO",
}

ChangeCallback = Callable[[Any, Any], None]

_log = get_logger("hashdrop.config")


def _config_path() -> Path:
    return app_data_dir() / "config.json"


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    p = path or _config_path()
    if not p.exists():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except Exception:
        # corrupted config; keep a backup and start fresh
        _log.warning("config file %s is corrupted, starting with defaults", p)
        try:
            p.rename(p.with_suffix(".json.bak"))
        except Exception:
            pass
        return {}
    return data if isinstance(data, dict) else {}


def save_config(cfg: Dict[str, Any], path: Optional[Path] = None) -> None:
    p = path or _config_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(cfg, ensure_ascii=False, indent=2), encoding="utf-8")


class SettingsStore:
    """Key/value settings persisted as JSON, with per-key change callbacks.

    Callbacks receive ``(new_value, old_value)`` and only fire when a ``set``
    actually changes the stored value.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = path or _config_path()
        self._data: Dict[str, Any] = load_config(self.path)
        self._listeners: Dict[str, List[ChangeCallback]] = {}

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._data:
            return self._data[key]
        # no explicit default -> the built-in one from DEFAULTS
        if default is None:
            return DEFAULTS.get(key)
        return default

    def set(self, key: str, value: Any) -> None:
        old = self.get(key)
        self._data[key] = value
        save_config(self._data, self.path)
        if value == old:
            return
        for cb in list(self._listeners.get(key, [])):
            # a listener rolled the value back; the rest must not see a stale one
            if self._data.get(key) != value:
                break
            cb(value, old)

    def subscribe(self, key: str, callback: ChangeCallback) -> None:
        self._listeners.setdefault(key, []).append(callback)
