from __future__ import annotations

from typing import Any, Callable, Dict

import keyboard
from PySide6.QtCore import QObject, Signal, Slot

from hashdrop.core.logging import get_logger

_log = get_logger("hashdrop.hotkeys")


class HotkeyError(RuntimeError):
    pass


class _HotkeyBridge(QObject):
    """Moves a hotkey press from keyboard's listener thread to the GUI thread."""

    fired = Signal()

    def __init__(self, handler: Callable[[], Any]):
        super().__init__()
        self._handler = handler
        self.fired.connect(self._dispatch)

    @Slot()
    def _dispatch(self) -> None:
        self._handler()


class KeyboardHotkeys:
    """Global accelerators backed by the `keyboard` library.

    Registering an accelerator twice is an error; unregistering one that is
    not registered does nothing.
    """

    def __init__(self):
        self._bound: Dict[str, tuple] = {}

    def is_registered(self, accelerator: str) -> bool:
        return accelerator in self._bound

    def register(self, accelerator: str, handler: Callable[[], Any]) -> None:
        if accelerator in self._bound:
            raise HotkeyError(f"{accelerator} is already registered")
        bridge = _HotkeyBridge(handler)
        handle = keyboard.add_hotkey(accelerator, bridge.fired.emit)
        self._bound[accelerator] = (handle, bridge)
        _log.debug("registered %s", accelerator)

    def unregister(self, accelerator: str) -> None:
        entry = self._bound.pop(accelerator, None)
        if entry is None:
            return
        handle, bridge = entry
        keyboard.remove_hotkey(handle)
        bridge.deleteLater()
        _log.debug("unregistered %s", accelerator)

    def unregister_all(self) -> None:
        for accelerator in list(self._bound):
            try:
                self.unregister(accelerator)
            except Exception:
                _log.warning("could not unregister %s", accelerator, exc_info=True)
