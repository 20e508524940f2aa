from __future__ import annotations

"""Write retrieved files into a target directory.

Every file is handled on its own: an existing destination is left untouched
(no overwrite, no comparison) and a failed write is logged without stopping
the remaining files. Callers get a summary of what happened but the download
counts as done either way.

The existence check and the write are not atomic; two downloads racing for
the same destination may both write.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable

from hashdrop.core.logging import get_logger
from hashdrop.services.retrieval import RetrievedFile

_log = get_logger("hashdrop.materializer")


class WriteOutcome(str, Enum):
    WRITTEN = "written"
    SKIPPED = "skipped"
    FAILED = "failed"


class MaterializationWriteError(OSError):
    pass


@dataclass
class MaterializeSummary:
    written: int = 0
    skipped: int = 0
    failed: int = 0

    def add(self, outcome: WriteOutcome) -> None:
        if outcome is WriteOutcome.WRITTEN:
            self.written += 1
        elif outcome is WriteOutcome.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1


def ensure_inside(target_root: Path, dest: Path) -> None:
    root = target_root.resolve()
    resolved = dest.resolve()
    if resolved != root and root not in resolved.parents:
        raise MaterializationWriteError(f"'{dest}' points outside {target_root}")


def save_file(target_root: Path, file: RetrievedFile) -> WriteOutcome:
    try:
        dest = target_root / file.path
        # any existing entry wins, even a symlink leading elsewhere
        if dest.exists() or dest.is_symlink():
            return WriteOutcome.SKIPPED
        ensure_inside(target_root, dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(file.content)
    except OSError:
        _log.exception("Could not write '%s' into %s", file.path, target_root)
        return WriteOutcome.FAILED
    _log.info("File '%s' downloaded to %s.", file.path, dest)
    return WriteOutcome.WRITTEN


def materialize(target_root: Path, files: Iterable[RetrievedFile]) -> MaterializeSummary:
    summary = MaterializeSummary()
    for f in files:
        summary.add(save_file(target_root, f))
    _log.info(
        "Materialized into %s: %d written, %d skipped, %d failed",
        target_root,
        summary.written,
        summary.skipped,
        summary.failed,
    )
    return summary
