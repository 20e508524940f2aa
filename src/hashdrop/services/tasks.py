from __future__ import annotations

from typing import Any, Callable, Set

from PySide6.QtCore import QObject, QThread, Signal, Slot

from hashdrop.core.logging import get_logger

_log = get_logger("hashdrop.tasks")


class _TaskWorker(QObject):
    succeeded = Signal(object)
    failed = Signal(object)  # the exception

    def __init__(self, fn: Callable[[], Any]):
        super().__init__()
        self._fn = fn

    @Slot()
    def run(self) -> None:
        try:
            result = self._fn()
        except Exception as e:
            self.failed.emit(e)
            return
        self.succeeded.emit(result)


class _TaskRelay(QObject):
    """Lives on the GUI thread so worker signals arrive there (queued)."""

    done = Signal()

    def __init__(self, on_success: Callable[[Any], None], on_error: Callable[[BaseException], None]):
        super().__init__()
        self._on_success = on_success
        self._on_error = on_error

    @Slot(object)
    def succeeded(self, result: Any) -> None:
        try:
            self._on_success(result)
        finally:
            self.done.emit()

    @Slot(object)
    def failed(self, exc: BaseException) -> None:
        try:
            self._on_error(exc)
        finally:
            self.done.emit()


class QtTaskRunner(QObject):
    """Run blocking callables on a QThread, report back on the GUI thread.

    Each submitted task gets its own thread; tasks are never queued behind
    each other.
    """

    def __init__(self, parent: QObject | None = None):
        super().__init__(parent)
        self._active: Set[tuple] = set()

    def submit(
        self,
        fn: Callable[[], Any],
        on_success: Callable[[Any], None],
        on_error: Callable[[BaseException], None],
    ) -> None:
        thread = QThread(self)
        worker = _TaskWorker(fn)
        relay = _TaskRelay(on_success, on_error)
        worker.moveToThread(thread)

        entry = (thread, worker, relay)
        self._active.add(entry)

        def on_done() -> None:
            thread.quit()
            self._active.discard(entry)

        worker.succeeded.connect(relay.succeeded)
        worker.failed.connect(relay.failed)
        relay.done.connect(on_done)
        thread.started.connect(worker.run)
        thread.finished.connect(worker.deleteLater)
        thread.finished.connect(relay.deleteLater)
        thread.finished.connect(thread.deleteLater)
        thread.start()

    @property
    def active_count(self) -> int:
        return len(self._active)

    def shutdown(self, timeout_ms: int = 3000) -> None:
        """Best-effort wait for in-flight tasks at quit."""
        # finished tasks may still own a QThread that is winding down
        for thread in self.findChildren(QThread):
            try:
                thread.quit()
                if not thread.wait(timeout_ms):
                    _log.warning("background task still running at shutdown")
            except Exception:
                pass
        self._active.clear()
