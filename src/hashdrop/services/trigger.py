from __future__ import annotations

from typing import Any, Callable, Optional

from hashdrop.core.logging import get_logger

_log = get_logger("hashdrop.trigger")


class TriggerToggle:
    """Arms/disarms the download hotkey.

    The hotkey is bound iff `armed` is True. `set_armed` only talks to the
    registrar when the state actually changes, so the registrar never sees a
    double registration. Once bound to a setting, a registrar failure puts the
    setting back to its previous value, so the saved value and the hotkey
    never disagree.
    """

    def __init__(self, registrar, accelerator: str, handler: Callable[[], Any]):
        self._registrar = registrar
        self.accelerator = accelerator
        self._handler = handler
        self._armed = False
        self._settings = None
        self._key: Optional[str] = None

    @property
    def armed(self) -> bool:
        return self._armed

    def set_armed(self, armed: bool) -> None:
        armed = bool(armed)
        if armed == self._armed:
            return
        if armed:
            self._registrar.register(self.accelerator, self._handler)
            _log.info("Hash download shortcut enabled")
        else:
            self._registrar.unregister(self.accelerator)
            _log.info("Hash download shortcut disabled")
        self._armed = armed

    def bind(self, settings, key: str) -> None:
        """Arm from the persisted value and follow its changes."""
        self._settings = settings
        self._key = key
        wanted = settings.get(key, False) is True
        try:
            self.set_armed(wanted)
        except Exception:
            _log.exception("Could not register the %s shortcut", self.accelerator)
            settings.set(key, self._armed)
        settings.subscribe(key, self.on_setting_changed)

    def on_setting_changed(self, value: Any, old_value: Any) -> None:
        """Settings listener: ``(new, old)`` of the shortcut toggle."""
        if value == old_value:
            return
        try:
            self.set_armed(value is True)
        except Exception:
            _log.exception("Could not %s the %s shortcut", "enable" if value is True else "disable", self.accelerator)
            if self._settings is not None:
                self._settings.set(self._key, self._armed)
