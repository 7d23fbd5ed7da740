#!/usr/bin/env python3
"""
Redmine Refs Hook - Appends Redmine ticket references to commit messages.

This prepare-commit-msg hook peeks Redmine ticket id(s) from the current git
branch name and appends "Refs: #xxxx" trailer(s) to the commit message.
Redmine parses this trailer to reference commits from the related tickets.

Branch "feature/1234-login-5678" gives, by default:

    Refs: #1234
    Refs: #5678

and with -1 (one-liner):

    Refs: #1234, #5678

Configuration (priority order):
1. Command-line arguments
2. Environment variables (MAX_ID_COUNT, MIN_ID_LENGTH, MAX_ID_LENGTH,
   ONE_LINER, DEFAULT_REF_VALUE, FAIL_IF_NO_IDS, KEEP_GOING)
3. Defaults: 5 IDs max, IDs of 3 to 10 digits, one trailer per ID

Existing identical trailers are never duplicated, so running the hook twice
is harmless.
"""

import argparse
import os
import re
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from hook_utils import (
    add_trailers,
    describe_failure,
    die,
    env_flag,
    get_current_branch,
    get_trailers,
    positive_int,
    warn,
)

REDMINE_TRAILER_KEY = "Refs"

DEFAULT_MAX_ID_COUNT = 5
DEFAULT_MIN_ID_LENGTH = 3
DEFAULT_MAX_ID_LENGTH = 10

DIGIT_RUN_PATTERN = re.compile(r"[0-9]+")

ENV_HELP = """\
environment variables (overridden by the matching argument):
  MAX_ID_COUNT       -c
  MIN_ID_LENGTH      -m
  MAX_ID_LENGTH      -M
  ONE_LINER          -1 (set when non-empty)
  DEFAULT_REF_VALUE  -d
  FAIL_IF_NO_IDS     -f (set when non-empty)
  KEEP_GOING         -k (set when non-empty)

examples of -d values: "#MISSING", "#none", "#0000" or "#"
"""


class NoIdsFoundError(Exception):
    """Raised when no IDs were found and the configuration requires some."""


@dataclass(frozen=True)
class RefsConfig:
    """Resolved configuration of one hook invocation."""

    commit_msg_file: str
    max_id_count: int = DEFAULT_MAX_ID_COUNT
    min_id_length: int = DEFAULT_MIN_ID_LENGTH
    max_id_length: int = DEFAULT_MAX_ID_LENGTH
    one_liner: bool = False
    default_ref_value: str = ""
    fail_if_no_ids: bool = False
    keep_going: bool = False

    def __post_init__(self) -> None:
        if self.min_id_length > self.max_id_length:
            raise ValueError(
                f"Min ID length ({self.min_id_length}) must not be greater "
                f"than max ID length ({self.max_id_length})"
            )


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser, seeding defaults from the environment.

    String defaults go through the same type converter as arguments, so an
    invalid environment value is reported like an invalid argument.
    """
    parser = argparse.ArgumentParser(
        description=(
            "Peek Redmine ticket id(s) from current git branch name "
            'and append a "Refs: #xxxx" trailer to the commit message.'
        ),
        epilog=ENV_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-c",
        "--max-id-count",
        metavar="N",
        type=positive_int,
        default=os.environ.get("MAX_ID_COUNT") or str(DEFAULT_MAX_ID_COUNT),
        help="no more than this amount of IDs are extracted (default: %(default)s)",
    )
    parser.add_argument(
        "-m",
        "--min-id-length",
        metavar="N",
        type=positive_int,
        default=os.environ.get("MIN_ID_LENGTH") or str(DEFAULT_MIN_ID_LENGTH),
        help="ignore IDs shorter than this (default: %(default)s)",
    )
    parser.add_argument(
        "-M",
        "--max-id-length",
        metavar="N",
        type=positive_int,
        default=os.environ.get("MAX_ID_LENGTH") or str(DEFAULT_MAX_ID_LENGTH),
        help="ignore IDs longer than this (default: %(default)s)",
    )
    parser.add_argument(
        "-1",
        "--one-liner",
        action="store_true",
        default=env_flag("ONE_LINER"),
        help='concatenate several refs in a single trailer with ", #"',
    )
    parser.add_argument(
        "-d",
        "--default-ref-value",
        metavar="VALUE",
        default=os.environ.get("DEFAULT_REF_VALUE", ""),
        help=(
            "ref value used when no IDs are found in branch name; "
            "when empty, no trailer is added (default: empty)"
        ),
    )
    parser.add_argument(
        "-f",
        "--fail-if-no-ids",
        action="store_true",
        default=env_flag("FAIL_IF_NO_IDS"),
        help="fail if no IDs are found, even if a non-empty -d is given",
    )
    parser.add_argument(
        "-k",
        "--keep-going",
        action="store_true",
        default=env_flag("KEEP_GOING"),
        help=(
            "create commit-msg-file if it does not exist "
            "(git gui calls prepare-commit-msg before creating it)"
        ),
    )
    parser.add_argument("commit_msg_file", metavar="commit-msg-file")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> RefsConfig:
    """
    Resolve the hook configuration from arguments and environment.

    Args:
        argv: Command-line arguments, defaults to sys.argv[1:].

    Returns:
        The immutable configuration.

    Raises:
        SystemExit: With code 2 on usage errors, 1 on inconsistent bounds,
            0 after printing help.
    """
    args = build_parser().parse_args(argv)

    try:
        return RefsConfig(
            commit_msg_file=args.commit_msg_file,
            max_id_count=args.max_id_count,
            min_id_length=args.min_id_length,
            max_id_length=args.max_id_length,
            one_liner=args.one_liner,
            default_ref_value=args.default_ref_value,
            fail_if_no_ids=args.fail_if_no_ids,
            keep_going=args.keep_going,
        )
    except ValueError as e:
        die(str(e))


def ensure_commit_msg_file(commit_msg_file: str, keep_going: bool) -> None:
    """
    Check the commit message file is writable, creating it if tolerated.

    Args:
        commit_msg_file: Path given as positional argument.
        keep_going: Create the file when it is missing.

    Raises:
        SystemExit: With code 1 if the path is not a writable file.
    """
    path = Path(commit_msg_file)

    if keep_going and not path.exists():
        warn(f"Missing required '{commit_msg_file}' commit-msg-file argument")
        warn(f"Creating '{commit_msg_file}' empty file as a workaround")
        try:
            path.touch()
        except OSError as e:
            die(f"Cannot create '{commit_msg_file}': {e.strerror}")

    if not (path.is_file() and os.access(path, os.W_OK)):
        die(f"commit-msg-file argument ({commit_msg_file}) is not a writable file")


def extract_ids(
    branch: str, min_length: int, max_length: int, max_count: int
) -> List[str]:
    """
    Extract ticket IDs from a branch name.

    IDs are maximal runs of decimal digits whose length lies within
    [min_length, max_length], in order of appearance.

    Args:
        branch: Branch short name.
        min_length: Minimum accepted digit count.
        max_length: Maximum accepted digit count.
        max_count: Maximum number of IDs returned.

    Returns:
        List of ID strings, possibly empty.

    Example:
        extract_ids("feature/1234-fix-56-7890", 3, 10, 5)  # ["1234", "7890"]
    """
    ids = [
        run
        for run in DIGIT_RUN_PATTERN.findall(branch)
        if min_length <= len(run) <= max_length
    ]
    return ids[:max_count]


def compute_ref_values(ids: List[str], config: RefsConfig) -> List[str]:
    """
    Decide which Refs trailer values to append.

    Decision table:
    - no IDs, fail_if_no_ids         -> NoIdsFoundError
    - no IDs, no default_ref_value   -> []
    - no IDs, default_ref_value      -> [default_ref_value]
    - IDs, one_liner                 -> ["#id1, #id2, ..."]
    - IDs                            -> ["#id1", "#id2", ...]

    Raises:
        NoIdsFoundError: If ids is empty and the configuration requires IDs.
    """
    if not ids:
        if config.fail_if_no_ids:
            raise NoIdsFoundError("No IDs found in current branch name")
        if not config.default_ref_value:
            return []
        return [config.default_ref_value]

    refs = [f"#{ticket_id}" for ticket_id in ids]
    if config.one_liner:
        return [", ".join(refs)]
    return refs


def peek_redmine_ids(config: RefsConfig) -> List[str]:
    """Return the IDs found in the current branch name, warning on detached HEAD."""
    branch = get_current_branch()
    if branch is None:
        warn("Cannot resolve current branch name (detached HEAD?), no IDs extracted")
        return []

    return extract_ids(
        branch, config.min_id_length, config.max_id_length, config.max_id_count
    )


def append_refs(commit_msg_file: str, ref_values: List[str]) -> List[str]:
    """
    Append Refs trailers which are not already in the commit message.

    Values already present, or repeated in ref_values, are skipped. The
    remaining ones are added with a single git interpret-trailers call.

    Args:
        commit_msg_file: Path to the commit message file.
        ref_values: Trailer values, in order.

    Returns:
        The values actually appended.

    Raises:
        subprocess.CalledProcessError: If git interpret-trailers fails.
    """
    existing = set(get_trailers(commit_msg_file))
    new_values = [
        value
        for value in dict.fromkeys(ref_values)
        if f"{REDMINE_TRAILER_KEY}: {value}" not in existing
    ]
    add_trailers(commit_msg_file, REDMINE_TRAILER_KEY, new_values)
    return new_values


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the Redmine refs hook."""
    config = parse_args(argv)
    ensure_commit_msg_file(config.commit_msg_file, config.keep_going)

    ids = peek_redmine_ids(config)

    try:
        ref_values = compute_ref_values(ids, config)
    except NoIdsFoundError as e:
        die(str(e))

    if not ref_values:
        sys.exit(0)

    try:
        append_refs(config.commit_msg_file, ref_values)
    except subprocess.CalledProcessError as e:
        die(f"Cannot add '{REDMINE_TRAILER_KEY}' trailers: {describe_failure(e)}")
    except OSError as e:
        die(f"Cannot run git: {e}")

    sys.exit(0)


if __name__ == "__main__":
    main()
