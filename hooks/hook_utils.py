#!/usr/bin/env python3
"""
Shared utilities for the git commit hooks.

This module provides common functionality for hook scripts including:
- Hook name detection
- Centralized ANSI color formatting and diagnostics
- Environment variable configuration helpers
- Thin wrappers over the git commands the hooks rely on
"""

import argparse
import os
import subprocess
import sys
from pathlib import Path
from typing import NoReturn


class Colors:
    """ANSI color codes for terminal output with convenience methods."""

    # Color codes
    RED = "\033[1;31m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @classmethod
    def red(cls, text: str) -> str:
        """Format text in red (for errors and blocking messages)."""
        return f"{cls.RED}{text}{cls.RESET}"

    @classmethod
    def yellow(cls, text: str) -> str:
        """Format text in yellow (for warnings and labels)."""
        return f"{cls.YELLOW}{text}{cls.RESET}"


def get_hook_name() -> str:
    """
    Return the calling hook script's filename without the .py extension.

    Returns:
        The hook name derived from the calling script's filename.

    Example:
        If the calling script is 'msg-add-redmine-refs.py',
        returns 'msg-add-redmine-refs'.
    """
    caller_path = Path(sys.argv[0])
    return caller_path.stem


def warn(message: str) -> None:
    """
    Print a warning prefixed with the hook name to stderr.

    Args:
        message: Warning text to print.
    """
    print(Colors.yellow(f"⚠️  {get_hook_name()}: {message}"), file=sys.stderr)


def die(message: str) -> NoReturn:
    """
    Print an error prefixed with the hook name to stderr and exit with status 1.

    Args:
        message: Error text to print.

    Raises:
        SystemExit: Always, with exit code 1.
    """
    print(Colors.red(f"❌ {get_hook_name()}: {message}"), file=sys.stderr)
    sys.exit(1)


def env_flag(name: str) -> bool:
    """
    Check whether a boolean environment variable is set.

    Any non-empty value counts as set, mirroring shell `[[ -n $VAR ]]` tests.

    Args:
        name: Environment variable name.

    Returns:
        True if the variable exists and is non-empty, False otherwise.

    Example:
        # With ONE_LINER=1
        env_flag("ONE_LINER")  # Returns True

        # With ONE_LINER= (empty) or unset
        env_flag("ONE_LINER")  # Returns False
    """
    return bool(os.environ.get(name))


def positive_int(text: str) -> int:
    """
    Argparse type converter accepting strictly positive integers.

    Args:
        text: Raw argument or environment variable value.

    Returns:
        The parsed integer.

    Raises:
        argparse.ArgumentTypeError: If text is not an integer >= 1.
    """
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {text!r}")
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {text!r}")
    return value


def run_git(*args: str, check: bool = True) -> subprocess.CompletedProcess:
    """
    Run a git command and capture its text output.

    Args:
        *args: Arguments passed after `git`.
        check: Raise CalledProcessError on a non-zero exit status.

    Returns:
        The completed process.

    Raises:
        subprocess.CalledProcessError: If check is set and git fails.
        FileNotFoundError: If git is not installed.
    """
    return subprocess.run(
        ["git", *args],
        capture_output=True,
        text=True,
        check=check,
    )


def get_current_branch() -> str | None:
    """
    Get the short name of the branch HEAD points to.

    Returns:
        The current branch name without its refs/heads/ prefix, or None on
        detached HEAD, outside a repository, or when git is unavailable.
    """
    try:
        result = run_git("symbolic-ref", "--short", "HEAD", check=False)
    except OSError:
        return None

    if result.returncode != 0:
        return None

    branch = result.stdout.strip()
    branch = branch.removeprefix("refs/heads/")
    return branch or None


def get_trailers(msg_file: str) -> list[str]:
    """
    Read the trailers of a commit message file.

    Args:
        msg_file: Path to the commit message file.

    Returns:
        Normalized "Key: value" lines of the trailer block, unfolded.

    Raises:
        subprocess.CalledProcessError: If git interpret-trailers fails.
    """
    result = run_git("interpret-trailers", "--parse", msg_file)
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def add_trailers(
    msg_file: str, key: str, values: list[str], if_exists: str = "addIfDifferent"
) -> None:
    """
    Append trailers sharing one key to a commit message file in place.

    All values go through a single git interpret-trailers call, so the
    --if-exists policy also sees the trailers added for earlier values.

    Args:
        msg_file: Path to the commit message file.
        key: Trailer key, e.g. "Refs".
        values: Trailer values, appended in order.
        if_exists: git interpret-trailers --if-exists policy.

    Raises:
        subprocess.CalledProcessError: If git interpret-trailers fails.

    Example:
        add_trailers(".git/COMMIT_EDITMSG", "Refs", ["#1234", "#5678"])
        # Commit message now ends with "Refs: #1234" and "Refs: #5678"
    """
    if not values:
        return

    trailer_args = []
    for value in values:
        trailer_args += ["--trailer", f"{key}: {value}"]

    run_git(
        "interpret-trailers",
        "--in-place",
        "--if-exists",
        if_exists,
        *trailer_args,
        msg_file,
    )


def trim_empty_trailers(msg_file: str) -> None:
    """
    Remove trailers whose trimmed value is empty from a commit message file.

    Raises:
        subprocess.CalledProcessError: If git interpret-trailers fails.
    """
    run_git("interpret-trailers", "--in-place", "--trim-empty", msg_file)


def list_tracked_files(pattern: str) -> list[str]:
    """
    List tracked files matching a pathspec relative to the repository top.

    Args:
        pattern: A git ls-files pattern, e.g. "*.sqlite" or "**.png".

    Returns:
        Matching file paths, relative to the current directory.

    Raises:
        subprocess.CalledProcessError: If git ls-files fails.
    """
    result = run_git("ls-files", "-z", "--", f":/{pattern}")
    return [f for f in result.stdout.split("\0") if f]


def describe_failure(error: subprocess.CalledProcessError) -> str:
    """Return git's stderr for a failed command, or a generic fallback."""
    stderr = (error.stderr or "").strip()
    if stderr:
        return stderr
    return f"command {error.cmd!r} exited with status {error.returncode}"
