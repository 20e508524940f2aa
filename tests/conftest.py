import os
import sys
from pathlib import Path

import pytest

# Ensure src/ is importable without an editable install
_SRC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, "src"))
if _SRC_DIR not in sys.path:
    sys.path.insert(0, _SRC_DIR)

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from tests.support import stubs as test_stubs


@pytest.fixture(autouse=True)
def _isolate_home(monkeypatch, tmp_path_factory):
    """Keep config and log files out of the real home directory."""
    home = tmp_path_factory.mktemp("hashdrop_home")
    monkeypatch.setenv("HASHDROP_HOME", str(Path(home)))
    yield


@pytest.fixture
def stubs():
    return test_stubs


@pytest.fixture
def qt_app():
    from PySide6.QtCore import QCoreApplication

    app = QCoreApplication.instance() or QCoreApplication([])
    yield app
