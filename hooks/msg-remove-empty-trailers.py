#!/usr/bin/env python3
"""
Empty Trailers Hook - Removes empty trailers from commit messages.

This commit-msg hook drops trailers whose trimmed value is empty, such as a
"Refs: " left behind by a commit template or by msg-add-redmine-refs run
with an empty default value.
"""

import argparse
import subprocess
import sys
from typing import List, Optional

from hook_utils import describe_failure, die, trim_empty_trailers


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the empty trailers hook."""
    parser = argparse.ArgumentParser(
        description="Remove trailers whose trimmed value is empty."
    )
    parser.add_argument(
        "commit_msg_files", nargs="+", metavar="commit-msg-file"
    )
    args = parser.parse_args(argv)

    for msg_file in args.commit_msg_files:
        try:
            trim_empty_trailers(msg_file)
        except subprocess.CalledProcessError as e:
            die(f"Cannot trim empty trailers of '{msg_file}': {describe_failure(e)}")
        except OSError as e:
            die(f"Cannot run git: {e}")

    sys.exit(0)


if __name__ == "__main__":
    main()
