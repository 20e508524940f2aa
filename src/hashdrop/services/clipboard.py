from __future__ import annotations

from PySide6.QtGui import QGuiApplication


class QtClipboard:
    """Reads plain text from the system clipboard (GUI thread only)."""

    def read_text(self) -> str:
        cb = QGuiApplication.clipboard()
        if cb is None:
            return ""
        return cb.text() or ""
