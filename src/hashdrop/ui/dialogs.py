from __future__ import annotations

from pathlib import Path
from typing import Optional

from PySide6.QtCore import QStandardPaths
from PySide6.QtWidgets import QFileDialog, QMessageBox, QWidget

SELECT_DIRECTORY_TITLE = "Select a directory"


def downloads_dir() -> str:
    loc = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.DownloadLocation)
    return loc or str(Path.home())


class DirectoryPicker:
    """Modal folder chooser; the user may also create a new folder in it."""

    def __init__(self, parent: Optional[QWidget] = None):
        self._parent = parent

    def choose(self) -> Optional[Path]:
        # getExistingDirectory spins a nested event loop, so hotkeys and
        # background task results are still delivered while it is open.
        res = QFileDialog.getExistingDirectory(
            self._parent,
            SELECT_DIRECTORY_TITLE,
            downloads_dir(),
            QFileDialog.Option.ShowDirsOnly,
        )
        if not res:
            return None
        return Path(res).resolve()


class ErrorDialogs:
    def __init__(self, parent: Optional[QWidget] = None):
        self._parent = parent

    def show_error(self, title: str, message: str) -> None:
        QMessageBox.critical(self._parent, title, message)
