import os

# Keep test runs from writing a log file or flooding the console
os.environ.setdefault("LOCALSEARCH_LOG_FILE", "")
os.environ.setdefault("LOCALSEARCH_QUIET", "true")

import pytest  # noqa: E402


@pytest.fixture
def temp_dir(tmp_path):
    """A scratch directory that doubles as a repository root."""
    repo = tmp_path / "repo"
    repo.mkdir()
    return repo


@pytest.fixture
def repo_env(temp_dir, monkeypatch):
    """Configure REPO_ROOTS to the scratch repository."""
    monkeypatch.setenv("REPO_ROOTS", str(temp_dir))
    monkeypatch.delenv("LOCALSEARCH_REPO_ROOTS", raising=False)
    monkeypatch.delenv("LOCALSEARCH_RG_PATH", raising=False)
    return temp_dir


@pytest.fixture
def write_lines():
    """Write ``count`` numbered lines without a trailing newline."""

    def _write(path, count):
        path.write_text("\n".join(f"line {i}" for i in range(1, count + 1)))
        return path

    return _write
