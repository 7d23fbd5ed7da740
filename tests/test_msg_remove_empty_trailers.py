#!/usr/bin/env python3
"""
Tests for msg-remove-empty-trailers hook.

Tests:
- main()
"""

# Import using importlib for hyphenated name
import importlib.util
import subprocess
import sys
from pathlib import Path
from unittest.mock import call, patch

import pytest
from conftest import requires_git

hooks_dir = Path(__file__).parent.parent / "hooks"
spec = importlib.util.spec_from_file_location(
    "msg_remove_empty_trailers", hooks_dir / "msg-remove-empty-trailers.py"
)
msg_remove_empty_trailers = importlib.util.module_from_spec(spec)
sys.modules["msg_remove_empty_trailers"] = msg_remove_empty_trailers
spec.loader.exec_module(msg_remove_empty_trailers)

main = msg_remove_empty_trailers.main


class TestMain:
    """Test main() entry point function."""

    def test_trims_every_given_file(self) -> None:
        """Should trim empty trailers of each file and exit 0."""
        with patch("msg_remove_empty_trailers.trim_empty_trailers") as mock_trim:
            with pytest.raises(SystemExit) as exc_info:
                main(["A", "B"])

        assert exc_info.value.code == 0
        assert mock_trim.call_args_list == [call("A"), call("B")]

    def test_requires_a_file(self) -> None:
        """Should fail without commit-msg-file."""
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code != 0

    def test_git_failure_is_fatal(self, capsys) -> None:
        """Should die with git's message."""
        error = subprocess.CalledProcessError(
            128, ["git"], stderr="fatal: could not open 'A'\n"
        )
        with patch(
            "msg_remove_empty_trailers.trim_empty_trailers", side_effect=error
        ):
            with pytest.raises(SystemExit) as exc_info:
                main(["A"])

        assert exc_info.value.code == 1
        assert "could not open 'A'" in capsys.readouterr().err

    @requires_git
    def test_removes_empty_trailers_from_real_file(self, commit_msg_file) -> None:
        """Should drop empty trailers and keep the others."""
        commit_msg_file.write_text(
            "Fix login form\n\nRefs:\nSigned-off-by: Test User <test@example.com>\n"
        )

        with pytest.raises(SystemExit) as exc_info:
            main([str(commit_msg_file)])

        assert exc_info.value.code == 0
        content = commit_msg_file.read_text()
        assert "Refs:" not in content
        assert "Signed-off-by: Test User <test@example.com>" in content
        assert content.startswith("Fix login form\n")
