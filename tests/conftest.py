import sys
from pathlib import Path
from typing import Dict

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'itpl'
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


from itpl.core.logging import reset_logging_for_tests
from itpl.core.store import MemoryFileStore


@pytest.fixture(autouse=True)
def _reset_itpl_logging():
    """Drop handlers the CLI installs so tests do not leak them into each other."""
    yield
    reset_logging_for_tests()


@pytest.fixture(autouse=True)
def _clear_itpl_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("ITPL_FUNCTIONS", "ITPL_MAX_FUNCTION_RETRIES", "ITPL_ENCODING", "ITPL_ROOT"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def memory_store():
    """Factory building a MemoryFileStore from a ``{path: content}`` mapping."""

    def _make(files: Dict[str, str]) -> MemoryFileStore:
        return MemoryFileStore(files)

    return _make


@pytest.fixture
def template_dir(tmp_path: Path):
    """Factory writing ``{relative path: content}`` under tmp_path/templates."""
    root = tmp_path / "templates"

    def _write(files: Dict[str, str]) -> Path:
        for rel, content in files.items():
            target = root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return root

    return _write
