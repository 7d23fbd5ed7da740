"""Pytest configuration for redmine-commit-hooks tests."""

import shutil
import subprocess
import sys
from pathlib import Path
from typing import Dict
from unittest.mock import MagicMock

import pytest

# Add hooks directory to path for imports - must happen before pytest collects
hooks_dir = Path(__file__).parent.parent / "hooks"
if str(hooks_dir) not in sys.path:
    sys.path.insert(0, str(hooks_dir))


requires_git = pytest.mark.skipif(
    shutil.which("git") is None, reason="git is not installed"
)


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def mock_subprocess(monkeypatch):
    """
    Mock subprocess.run with configurable return values.

    Usage:
        def test_example(mock_subprocess):
            result = mock_subprocess(returncode=0, stdout='main\n')
            # Test code that uses subprocess.run
            assert result.returncode == 0
    """
    def _mock(returncode: int = 0, stdout: str = '', stderr: str = ''):
        result = MagicMock()
        result.returncode = returncode
        result.stdout = stdout
        result.stderr = stderr
        monkeypatch.setattr('subprocess.run', lambda *a, **kw: result)
        return result

    return _mock


@pytest.fixture
def mock_env(monkeypatch):
    """
    Mock environment variables.

    Usage:
        def test_example(mock_env):
            mock_env({"MAX_ID_COUNT": "2"})
            # Test code that uses os.environ
    """
    def _mock(env_vars: Dict[str, str]) -> None:
        for k, v in env_vars.items():
            monkeypatch.setenv(k, v)

    return _mock


@pytest.fixture
def commit_msg_file(tmp_path):
    """
    Create a commit message file with a subject line.

    Usage:
        def test_example(commit_msg_file):
            # commit_msg_file is a Path to an existing writable file
            commit_msg_file.read_text()
    """
    msg_file = tmp_path / 'COMMIT_EDITMSG'
    msg_file.write_text('Fix login form\n')
    return msg_file


@pytest.fixture
def git_repo(tmp_path, monkeypatch):
    """
    Create a real git repository and make it the current directory.

    Usage:
        @requires_git
        def test_example(git_repo):
            git_repo('checkout', '-b', 'feature/1234')
            # git_repo.path is the repository root
    """
    repo = tmp_path / 'repo'
    repo.mkdir()
    monkeypatch.chdir(repo)
    for var in ('GIT_DIR', 'GIT_WORK_TREE', 'GIT_INDEX_FILE'):
        monkeypatch.delenv(var, raising=False)

    def _git(*args: str) -> str:
        result = subprocess.run(
            ['git', *args], cwd=repo, capture_output=True, text=True, check=True
        )
        return result.stdout

    _git('init', '--quiet')
    _git('config', 'user.name', 'Test User')
    _git('config', 'user.email', 'test@example.com')
    _git.path = repo
    return _git
