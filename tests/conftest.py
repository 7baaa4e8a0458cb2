"""Shared test fixtures and configuration."""

from collections.abc import Callable
import os
from pathlib import Path
import sys

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


# Complete test environment that overrides every config value
TEST_ENV = {
    "DATA_DIR": "data",
    "CACHE_DIR": ".mdindex-test-cache",
    "FILE_EXTENSIONS": ".md",
    "AUTO_REBUILD_INTERVAL_HOURS": "0",  # No background refresh in tests
    "PAGE_SIZE": "15",
    "MAX_HITS_PER_RESULT": "3",
    "LOG_LEVEL": "info",
    "LOG_JSON": "false",
    "OBSERVABILITY_SETUP": "false",  # Leave pytest log capture in place
}


# Set environment variables immediately when conftest.py is loaded
for key, value in TEST_ENV.items():
    os.environ[key] = value

# Now we can safely import config-dependent modules
from mdindex.config import Settings
from mdindex.services import rebuild_scheduler


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Pin the environment before each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture(autouse=True)
def reset_active_scheduler():
    """Forget the process-wide active scheduler between tests."""
    yield
    rebuild_scheduler._active_holder["scheduler"] = None


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def settings(cache_dir: Path) -> Settings:
    return Settings(cache_dir=cache_dir, auto_rebuild_interval_hours=0)


@pytest.fixture
def write_doc(data_dir: Path) -> Callable[..., str]:
    """Write a document under the data dir and return its scanned path string."""

    def _write(relative: str, content: str, *, mtime: float | None = None) -> str:
        path = data_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return str(path)

    return _write
