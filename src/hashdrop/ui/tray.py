from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QAction, QColor, QIcon, QPainter, QPixmap
from PySide6.QtWidgets import QMenu, QSystemTrayIcon

from hashdrop.config.storage import DOWNLOAD_HASH_SHORTCUT


def _badge_icon() -> QIcon:
    """Simple drawn tray icon (no packaged assets needed)."""
    pm = QPixmap(32, 32)
    pm.fill(Qt.transparent)
    painter = QPainter(pm)
    painter.setRenderHint(QPainter.Antialiasing, True)
    painter.setBrush(QColor("#469EA2"))
    painter.setPen(Qt.NoPen)
    painter.drawRoundedRect(pm.rect().adjusted(1, 1, -1, -1), 7, 7)
    painter.setPen(QColor("#ffffff"))
    painter.drawText(pm.rect(), Qt.AlignCenter, "#")
    painter.end()
    return QIcon(pm)


class TrayIcon(QSystemTrayIcon):
    """Tray menu: the shortcut toggle (bound to the setting) and Quit."""

    quit_requested = Signal()

    def __init__(self, settings, hotkey: str, parent=None):
        super().__init__(_badge_icon(), parent)
        self._settings = settings
        self.setToolTip("hashdrop")

        self._menu = QMenu()
        self.act_shortcut = QAction(f"Download hash from clipboard ({hotkey})", self._menu)
        self.act_shortcut.setCheckable(True)
        self.act_shortcut.setChecked(bool(settings.get(DOWNLOAD_HASH_SHORTCUT, False)))
        self.act_shortcut.toggled.connect(self._on_shortcut_toggled)
        self._menu.addAction(self.act_shortcut)

        self._menu.addSeparator()
        act_quit = QAction("Quit", self._menu)
        act_quit.triggered.connect(self.quit_requested.emit)
        self._menu.addAction(act_quit)

        self.setContextMenu(self._menu)
        settings.subscribe(DOWNLOAD_HASH_SHORTCUT, self._on_setting_changed)

    def _on_shortcut_toggled(self, checked: bool) -> None:
        self._settings.set(DOWNLOAD_HASH_SHORTCUT, bool(checked))

    def _on_setting_changed(self, _value, _old) -> None:
        # follow the stored value; a failed hotkey registration resets it
        current = bool(self._settings.get(DOWNLOAD_HASH_SHORTCUT, False))
        if self.act_shortcut.isChecked() != current:
            self.act_shortcut.setChecked(current)
