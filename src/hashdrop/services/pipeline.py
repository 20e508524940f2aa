from __future__ import annotations

"""One hotkey press -> clipboard reference -> files on disk.

Each `DownloadPipeline.trigger()` call builds its own `DownloadJob` and walks
it through

    IDLE -> READ_CLIPBOARD -> VALIDATE -> FETCHING -> CHOOSING_DIRECTORY
         -> MATERIALIZING -> IDLE

with early exits back to IDLE on an empty clipboard / missing node (silent),
an invalid reference (dialog), a failed fetch (dialog + log) and a cancelled
directory choice (log only). The fetch runs on the task runner; everything
else happens on the GUI thread. Jobs are independent: a second press while
one is in flight starts a second job.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from hashdrop.core.logging import get_logger
from hashdrop.core.ui_errors import format_error_message
from hashdrop.services.materializer import MaterializeSummary, materialize
from hashdrop.services.reference import is_content_reference
from hashdrop.services.retrieval import RetrievedFile, fetch

INVALID_HASH_TITLE = "Invalid Hash"
INVALID_HASH_MESSAGE = "The hash you provided is invalid."
DOWNLOAD_ERROR_TITLE = "Error while downloading"
DOWNLOAD_ERROR_MESSAGE = "Some error happened while getting the hash. Please check the logs."

_log = get_logger("hashdrop.pipeline")


class JobState(str, Enum):
    IDLE = "idle"
    READ_CLIPBOARD = "read_clipboard"
    VALIDATE = "validate"
    FETCHING = "fetching"
    CHOOSING_DIRECTORY = "choosing_directory"
    MATERIALIZING = "materializing"


@dataclass
class DownloadJob:
    reference: str = ""
    state: JobState = JobState.IDLE
    files: List[RetrievedFile] = field(default_factory=list)
    target_root: Optional[Path] = None
    summary: Optional[MaterializeSummary] = None


def resolve_target_root(chosen: Path, reference: str, files: List[RetrievedFile]) -> Path:
    """Multi-file sets go into a subdirectory named after the reference."""
    if len(files) > 1:
        # "/ipfs/<cid>/dir" must stay below the chosen directory.
        return chosen / reference.strip("/")
    return chosen


class DownloadPipeline:
    def __init__(
        self,
        *,
        clipboard,
        node,
        picker,
        dialogs,
        runner,
        materializer: Callable[[Path, List[RetrievedFile]], MaterializeSummary] = materialize,
    ):
        self._clipboard = clipboard
        self._node = node
        self._picker = picker
        self._dialogs = dialogs
        self._runner = runner
        self._materialize = materializer

    def trigger(self) -> DownloadJob:
        """Hotkey handler. Returns the job; the fetch may still be running."""
        job = DownloadJob(state=JobState.READ_CLIPBOARD)
        text = (self._clipboard.read_text() or "").strip()
        api = self._node.api

        if api is None or not text:
            job.state = JobState.IDLE
            return job

        job.reference = text
        job.state = JobState.VALIDATE
        if not is_content_reference(text):
            _log.info("Rejected clipboard text as invalid hash: %r", text[:100])
            job.state = JobState.IDLE
            self._dialogs.show_error(INVALID_HASH_TITLE, INVALID_HASH_MESSAGE)
            return job

        job.state = JobState.FETCHING
        self._runner.submit(
            lambda: fetch(api, text),
            lambda files: self._on_fetched(job, files),
            lambda exc: self._on_fetch_failed(job, exc),
        )
        return job

    def _on_fetch_failed(self, job: DownloadJob, exc: BaseException) -> None:
        job.state = JobState.IDLE
        body = format_error_message(DOWNLOAD_ERROR_MESSAGE, exc, area="FETCH")
        self._dialogs.show_error(DOWNLOAD_ERROR_TITLE, body)

    def _on_fetched(self, job: DownloadJob, files: List[RetrievedFile]) -> None:
        job.files = list(files)
        _log.info("Hash %s downloaded.", job.reference)

        job.state = JobState.CHOOSING_DIRECTORY
        chosen = self._picker.choose()
        if chosen is None:
            _log.info("Dropping hash %s: user didn't choose a path.", job.reference)
            job.state = JobState.IDLE
            return

        job.state = JobState.MATERIALIZING
        try:
            target_root = resolve_target_root(Path(chosen), job.reference, job.files)
            if target_root != Path(chosen):
                # Not caught: with nowhere to put the files the job just dies.
                target_root.mkdir(parents=True, exist_ok=True)
            job.target_root = target_root
            job.summary = self._materialize(target_root, job.files)
        finally:
            job.state = JobState.IDLE
