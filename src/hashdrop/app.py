import sys

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QApplication, QSystemTrayIcon

from hashdrop.config.storage import DOWNLOAD_HASH_SHORTCUT, HOTKEY, IPFS_API_URL, LOG_LEVEL, SettingsStore
from hashdrop.core.debug_support import log_startup_snapshot
from hashdrop.core.logging import get_logger
from hashdrop.core.logging_setup import install_excepthook, route_qt_messages, setup_logging
from hashdrop.services.clipboard import QtClipboard
from hashdrop.services.hotkeys import KeyboardHotkeys
from hashdrop.services.ipfs_api import IpfsNode
from hashdrop.services.pipeline import DownloadPipeline
from hashdrop.services.tasks import QtTaskRunner
from hashdrop.services.trigger import TriggerToggle
from hashdrop.ui.dialogs import DirectoryPicker, ErrorDialogs
from hashdrop.ui.tray import TrayIcon

NODE_RETRY_MS = 10_000

_log = get_logger("hashdrop.app")


def _start_node_watch(app: QApplication, node: IpfsNode, runner: QtTaskRunner) -> QTimer:
    """Ping the IPFS node off the GUI thread until it answers."""
    timer = QTimer(app)
    timer.setInterval(NODE_RETRY_MS)
    state = {"pending": False}

    def on_done(ok) -> None:
        state["pending"] = False
        if ok:
            timer.stop()

    def on_error(exc: BaseException) -> None:
        state["pending"] = False
        _log.warning("IPFS node check failed: %s", exc)

    def ping() -> None:
        if node.connected or state["pending"]:
            return
        state["pending"] = True
        runner.submit(node.connect, on_done, on_error)

    timer.timeout.connect(ping)
    timer.start()
    ping()
    return timer


def main() -> int:
    app = QApplication(sys.argv)
    # Tray-only app: closing a dialog must not end the process.
    app.setQuitOnLastWindowClosed(False)

    settings = SettingsStore()
    setup_logging(settings.get(LOG_LEVEL))
    route_qt_messages()
    install_excepthook()
    try:
        log_startup_snapshot()
    except Exception:
        pass

    node = IpfsNode(settings.get(IPFS_API_URL))
    runner = QtTaskRunner(app)
    pipeline = DownloadPipeline(
        clipboard=QtClipboard(),
        node=node,
        picker=DirectoryPicker(),
        dialogs=ErrorDialogs(),
        runner=runner,
    )

    hotkey = settings.get(HOTKEY)
    hotkeys = KeyboardHotkeys()
    toggle = TriggerToggle(hotkeys, hotkey, pipeline.trigger)
    # keyboard needs root on Linux; a failed registration resets the setting
    toggle.bind(settings, DOWNLOAD_HASH_SHORTCUT)

    _start_node_watch(app, node, runner)

    tray = TrayIcon(settings, hotkey)
    tray.quit_requested.connect(app.quit)
    if not QSystemTrayIcon.isSystemTrayAvailable():
        _log.warning("No system tray available; toggle the shortcut in %s", settings.path)
    tray.show()

    def graceful_shutdown() -> None:
        try:
            hotkeys.unregister_all()
        except Exception:
            pass
        try:
            runner.shutdown()
        except Exception:
            pass
        _log.info("graceful shutdown completed")

    app.aboutToQuit.connect(graceful_shutdown)

    return app.exec()
