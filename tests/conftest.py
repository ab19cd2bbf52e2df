import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'oshelpers' and tests/ importable as 'tests'
for p in (SRC_ROOT, REPO_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from tests.helpers.cache_utils import reset_oshelpers_caches


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch, tmp_path_factory):
    """Run every test against bundled defaults and a private temp root.

    Developer shells may export OSHELPERS_* overrides; tests must be
    deterministic, so they are always cleared.
    """
    for key in list(os.environ):
        if key.startswith("OSHELPERS_"):
            monkeypatch.delenv(key, raising=False)
    temp_root = tmp_path_factory.mktemp("oshelpers_tmp")
    monkeypatch.setenv("OSHELPERS_temp__directory", str(temp_root))
    reset_oshelpers_caches()
    yield
    reset_oshelpers_caches()


@pytest.fixture
def temp_root() -> Path:
    """The directory TempFile/TempDirectory use during this test."""
    return Path(os.environ["OSHELPERS_temp__directory"])


@pytest.fixture
def config_dir(tmp_path, monkeypatch) -> Path:
    """An empty user config directory wired through OSHELPERS_CONFIG_DIR."""
    d = tmp_path / "config"
    d.mkdir()
    monkeypatch.setenv("OSHELPERS_CONFIG_DIR", str(d))
    reset_oshelpers_caches()
    return d
