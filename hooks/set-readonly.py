#!/usr/bin/env python3
"""
Set Read-Only Hook - Removes write permission of given tracked file(s).

This pre-commit hook is an action, not a test. It should never fail:
- Files already read-only are left untouched
- Files not yet read-only are made read-only (a-w)
- Files listed by git but missing from the work tree are ignored

Given patterns are git ls-files pathspecs, resolved from the repository top.
Forgetting to override the pre-commit `args` array makes the hook fail.
"""

import argparse
import stat
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from hook_utils import describe_failure, die, list_tracked_files

WRITE_BITS = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH

EXAMPLES = """\
examples:
  %(prog)s "*.sqlite"
      SQLite files in top folder will be made read-only
  %(prog)s "**.sqlite"
      SQLite files in all repo will be made read-only
  %(prog)s "**.sqlite" "**.png" "**.PNG"
      SQLite and PNG files in all repo will be made read-only
"""


def make_readonly(file_path: str) -> Optional[str]:
    """
    Clear all write bits of a file.

    Args:
        file_path: Path to the file.

    Returns:
        A chmod --changes like description of the mode change, or None when
        nothing was changed (already read-only or missing).
    """
    path = Path(file_path)
    try:
        mode = stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        return None

    if not mode & WRITE_BITS:
        return None

    new_mode = mode & ~WRITE_BITS
    path.chmod(new_mode)
    return (
        f"mode of '{file_path}' changed from {mode:04o} "
        f"({stat.filemode(mode)[1:]}) to {new_mode:04o} "
        f"({stat.filemode(new_mode)[1:]})"
    )


def set_readonly(patterns: List[str]) -> List[str]:
    """
    Make every tracked file matching one of the patterns read-only.

    Args:
        patterns: git ls-files patterns.

    Returns:
        Descriptions of the mode changes performed.

    Raises:
        subprocess.CalledProcessError: If git ls-files fails.
    """
    changes = []
    for pattern in patterns:
        for file_path in list_tracked_files(pattern):
            change = make_readonly(file_path)
            if change:
                changes.append(change)
    return changes


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the set-readonly hook."""
    parser = argparse.ArgumentParser(
        description="Remove write permission of given tracked file(s).",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "patterns",
        nargs="*",
        metavar="pattern",
        help="git ls-files pattern, relative to repository top",
    )
    args = parser.parse_args(argv)

    if not args.patterns:
        die(
            "Required argument missing, at least one git ls-files pattern "
            "expected, see -h\n"
            "Hint: you may have forgotten to override pre-commit args array"
        )

    try:
        changes = set_readonly(args.patterns)
    except subprocess.CalledProcessError as e:
        die(f"Cannot list tracked files: {describe_failure(e)}")
    except OSError as e:
        die(f"Cannot change file mode: {e}")

    for change in changes:
        print(change)

    sys.exit(0)


if __name__ == "__main__":
    main()
