from pathlib import Path

import pytest

from hashdrop.services.pipeline import (
    DOWNLOAD_ERROR_TITLE,
    INVALID_HASH_MESSAGE,
    INVALID_HASH_TITLE,
    DownloadPipeline,
    JobState,
    resolve_target_root,
)
from hashdrop.services.retrieval import RetrievedFile
from tests.support.stubs import (
    VALID_CID_V0,
    DeferredRunner,
    FakeApi,
    FakeClipboard,
    FakeDialogs,
    FakeNode,
    FakePicker,
    InlineRunner,
)


def _pipeline(text, api=None, chosen=None, runner=None, **kwargs):
    parts = {
        "clipboard": FakeClipboard(text),
        "node": FakeNode(api),
        "picker": FakePicker(chosen),
        "dialogs": FakeDialogs(),
        "runner": runner or InlineRunner(),
    }
    pipeline = DownloadPipeline(**parts, **kwargs)
    return pipeline, parts


README = [{"path": "readme.txt", "content": b"hello ipfs"}]
TREE = [
    {"path": "a.txt", "content": b"a"},
    {"path": "sub/b.txt", "content": b"b"},
]


@pytest.mark.unit
def test_invalid_hash_shows_dialog_and_skips_fetch():
    api = FakeApi(README)
    pipeline, parts = _pipeline("not-a-hash", api=api)

    job = pipeline.trigger()

    assert job.state is JobState.IDLE
    assert parts["dialogs"].shown == [(INVALID_HASH_TITLE, INVALID_HASH_MESSAGE)]
    assert api.calls == []
    assert parts["runner"].submitted == 0


@pytest.mark.unit
@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_empty_clipboard_is_silent(text):
    api = FakeApi(README)
    pipeline, parts = _pipeline(text, api=api)

    job = pipeline.trigger()

    assert job.state is JobState.IDLE
    assert parts["dialogs"].shown == []
    assert api.calls == []


@pytest.mark.unit
def test_missing_node_is_silent():
    pipeline, parts = _pipeline("not-a-hash", api=None)

    job = pipeline.trigger()

    assert job.state is JobState.IDLE
    # not even validated
    assert parts["dialogs"].shown == []
    assert parts["runner"].submitted == 0


@pytest.mark.unit
def test_single_file_lands_in_chosen_directory(tmp_path, caplog):
    out = tmp_path / "out"
    out.mkdir()
    api = FakeApi(README)
    pipeline, parts = _pipeline(f"  {VALID_CID_V0}\n", api=api, chosen=out)

    with caplog.at_level("INFO", logger="hashdrop"):
        job = pipeline.trigger()

    assert api.calls == [VALID_CID_V0]
    assert job.reference == VALID_CID_V0
    assert job.state is JobState.IDLE
    assert job.target_root == out
    assert (out / "readme.txt").read_bytes() == b"hello ipfs"
    assert parts["dialogs"].shown == []
    assert f"Hash {VALID_CID_V0} downloaded." in caplog.text
    assert "File 'readme.txt' downloaded to" in caplog.text


@pytest.mark.unit
def test_existing_destination_is_kept(tmp_path):
    out = tmp_path / "out"
    out.mkdir()
    (out / "readme.txt").write_bytes(b"mine")
    pipeline, parts = _pipeline(VALID_CID_V0, api=FakeApi(README), chosen=out)

    job = pipeline.trigger()

    assert (out / "readme.txt").read_bytes() == b"mine"
    assert job.summary.skipped == 1
    assert job.summary.written == 0
    assert parts["dialogs"].shown == []


@pytest.mark.unit
def test_cancelled_directory_choice_writes_nothing(tmp_path, caplog):
    pipeline, parts = _pipeline(VALID_CID_V0, api=FakeApi(README), chosen=None)

    with caplog.at_level("INFO", logger="hashdrop"):
        job = pipeline.trigger()

    assert parts["picker"].calls == 1
    assert job.state is JobState.IDLE
    assert job.target_root is None
    assert job.summary is None
    assert parts["dialogs"].shown == []
    assert f"Dropping hash {VALID_CID_V0}: user didn't choose a path." in caplog.text
    assert list(tmp_path.iterdir()) == []


@pytest.mark.unit
def test_fetch_failure_shows_dialog_and_logs_cause(tmp_path, caplog):
    api = FakeApi(exc=ConnectionError("peer unreachable"))
    pipeline, parts = _pipeline(VALID_CID_V0, api=api, chosen=tmp_path)

    with caplog.at_level("ERROR", logger="hashdrop"):
        job = pipeline.trigger()

    assert job.state is JobState.IDLE
    assert parts["picker"].calls == 0
    assert len(parts["dialogs"].shown) == 1
    title, message = parts["dialogs"].shown[0]
    assert title == DOWNLOAD_ERROR_TITLE
    assert "Please check the logs." in message
    assert "Error code: FETCH-" in message
    # the cause is logged, never shown
    assert "peer unreachable" not in message
    assert "peer unreachable" in caplog.text
    assert list(tmp_path.iterdir()) == []


@pytest.mark.unit
def test_multi_file_set_goes_into_reference_subdirectory(tmp_path):
    pipeline, _ = _pipeline(VALID_CID_V0, api=FakeApi(TREE), chosen=tmp_path)

    job = pipeline.trigger()

    root = tmp_path / VALID_CID_V0
    assert job.target_root == root
    assert (root / "a.txt").read_bytes() == b"a"
    assert (root / "sub" / "b.txt").read_bytes() == b"b"


@pytest.mark.unit
def test_path_reference_subdirectory_stays_under_chosen_directory(tmp_path):
    ref = f"/ipfs/{VALID_CID_V0}/site"
    pipeline, _ = _pipeline(ref, api=FakeApi(TREE), chosen=tmp_path)

    job = pipeline.trigger()

    assert job.target_root == tmp_path / "ipfs" / VALID_CID_V0 / "site"
    assert (job.target_root / "a.txt").exists()


@pytest.mark.unit
def test_refetching_multi_file_set_is_idempotent(tmp_path):
    pipeline, parts = _pipeline(VALID_CID_V0, api=FakeApi(TREE), chosen=tmp_path)

    pipeline.trigger()
    (tmp_path / VALID_CID_V0 / "a.txt").write_bytes(b"edited")
    job = pipeline.trigger()

    assert job.summary.skipped == 2
    assert (tmp_path / VALID_CID_V0 / "a.txt").read_bytes() == b"edited"
    assert parts["dialogs"].shown == []


@pytest.mark.unit
def test_partial_write_failure_still_completes_silently(tmp_path, monkeypatch):
    real_write_bytes = Path.write_bytes

    def flaky(self, data):
        if self.name == "a.txt":
            raise OSError("no space left on device")
        return real_write_bytes(self, data)

    monkeypatch.setattr(Path, "write_bytes", flaky)
    pipeline, parts = _pipeline(VALID_CID_V0, api=FakeApi(TREE), chosen=tmp_path)

    job = pipeline.trigger()

    assert job.state is JobState.IDLE
    assert (job.summary.written, job.summary.failed) == (1, 1)
    assert (tmp_path / VALID_CID_V0 / "sub" / "b.txt").exists()
    assert parts["dialogs"].shown == []


@pytest.mark.unit
def test_subdirectory_creation_failure_propagates(tmp_path):
    # a plain file where the subdirectory should go
    (tmp_path / VALID_CID_V0).write_bytes(b"in the way")
    materialized = []
    pipeline, parts = _pipeline(
        VALID_CID_V0,
        api=FakeApi(TREE),
        chosen=tmp_path,
        materializer=lambda root, files: materialized.append(root),
    )

    with pytest.raises(OSError):
        pipeline.trigger()

    assert materialized == []
    assert parts["dialogs"].shown == []


@pytest.mark.unit
def test_concurrent_triggers_are_independent_jobs(tmp_path):
    runner = DeferredRunner()
    api = FakeApi(README)
    pipeline, parts = _pipeline(VALID_CID_V0, api=api, chosen=tmp_path, runner=runner)

    first = pipeline.trigger()
    second = pipeline.trigger()

    assert first is not second
    assert first.state is JobState.FETCHING
    assert second.state is JobState.FETCHING
    assert len(runner.pending) == 2

    runner.run_all()

    assert first.state is JobState.IDLE and second.state is JobState.IDLE
    assert parts["picker"].calls == 2
    assert first.summary.written == 1
    assert second.summary.skipped == 1


@pytest.mark.unit
def test_resolve_target_root():
    chosen = Path("/tmp/out")
    one = [RetrievedFile("x", b"")]
    two = [RetrievedFile("x", b""), RetrievedFile("y", b"")]

    assert resolve_target_root(chosen, VALID_CID_V0, one) == chosen
    assert resolve_target_root(chosen, VALID_CID_V0, two) == chosen / VALID_CID_V0
    assert resolve_target_root(chosen, "/ipfs/" + VALID_CID_V0, two) == chosen / "ipfs" / VALID_CID_V0
